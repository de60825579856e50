"""
Error classes for the FM pipeline.

Every stage fails synchronously with one of these; there is no partial result.
They all derive from ValueError so callers that only care about "bad model"
can catch a single built-in type.
"""

from __future__ import annotations

from typing import List, Optional


class FMError(ValueError):
    """Base class for every model error raised by the pipeline."""


class FMSyntaxError(FMError):
    """Malformed FM source. Always carries the line number and the raw text."""

    def __init__(self, message: str, *, line: int, text: str) -> None:
        super().__init__(f"{message} (line {line}): \"{text}\"")
        self.line = line
        self.text = text


class LinkError(FMError):
    """Duplicate symbols, unknown references, ambiguous argument fan-in."""


class GraphError(FMError):
    """Output dependency graph could not be ordered."""


class CycleError(GraphError):
    def __init__(self, cycle: List[str]) -> None:
        self.cycle = list(cycle)
        trace = " -> ".join(self.cycle) if self.cycle else "<unresolved>"
        super().__init__(f"Dependency cycle detected at output level: {trace}")


class EngineError(FMError):
    """Runtime failure while executing an alias (missing input, bad schema, bad function)."""

    def __init__(self, message: str, *, alias: Optional[str] = None) -> None:
        super().__init__(message)
        self.alias = alias
