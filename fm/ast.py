"""
FM abstract syntax tree.

Every node is a frozen dataclass; linking produces new nodes rather than
editing parsed ones. Arguments form a small tagged union (``kind``):

  RefArg     ``Name.field``       — Name is an object or an output alias
  SpreadArg  ``...Object.field``  — expands to one RefArg per declared output
                                    of Object (only exists before linking)
  LiteralArg ``12`` / ``monthly`` — number, or an opaque identifier
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union


@dataclass(frozen=True)
class RefArg:
    name: str
    field: str
    raw: str = ""
    from_spread_of: Optional[str] = None
    kind: str = field(default="ref", init=False)


@dataclass(frozen=True)
class SpreadArg:
    object: str
    field: str
    raw: str = ""
    kind: str = field(default="spread", init=False)


@dataclass(frozen=True)
class LiteralArg:
    value: Union[float, str]
    raw: str = ""
    kind: str = field(default="literal", init=False)

    @property
    def is_number(self) -> bool:
        return isinstance(self.value, float)


Arg = Union[RefArg, SpreadArg, LiteralArg]


@dataclass(frozen=True)
class ObjectNode:
    name: str
    fn_name: str
    args: Tuple[Arg, ...]
    outputs: Tuple[str, ...]
    # alias -> {field: raw value} written inline as ``alias(key: value)``
    output_assumptions: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    section: str = ""
    comment: str = ""
    line: int = 0

    @property
    def id(self) -> str:
        return f"{self.section}.{self.name}"


@dataclass(frozen=True)
class Section:
    name: str
    line: int
    objects: Tuple[ObjectNode, ...] = ()


@dataclass(frozen=True)
class ModelAST:
    sections: Tuple[Section, ...]
    objects: Tuple[ObjectNode, ...]
    metadata: Dict[str, str] = field(default_factory=dict)

    def find(self, name: str) -> Optional[ObjectNode]:
        for node in self.objects:
            if node.name == name:
                return node
        return None
