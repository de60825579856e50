"""
Structural FM parser — text to ModelAST, no symbol resolution.

Grammar (one logical definition per object, possibly spread over lines):

    FM                                   optional header line
    // Key: value                        metadata, only before the first code line
    Section:                             section header
    // comment                           attached to the next object
    Name = Type(arg, ...) => out1, out2(key: 5%)   // trailing comment

A line that starts with ``Identifier =`` opens an object; any following line
that is not blank, a section header, a standalone comment or another object
start is a continuation and is appended to it. Blank lines close the open
object and drop standalone comments that were not yet attached.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from core.errors import FMSyntaxError

from .ast import Arg, LiteralArg, ModelAST, ObjectNode, RefArg, Section, SpreadArg

logger = logging.getLogger(__name__)

SECTION_RE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_]*)\s*:\s*$")
OBJECT_RE = re.compile(
    r"^\s*([A-Za-z][A-Za-z0-9_]*)\s*=\s*([A-Za-z][A-Za-z0-9_]*)\s*\((.*?)\)"
    r"\s*(?:(?:=>|>)\s*(.*?))?\s*(?://(.*))?$"
)
OBJECT_START_RE = re.compile(r"^\s*[A-Za-z][A-Za-z0-9_]*\s*=")
METADATA_RE = re.compile(r"^//\s*([A-Za-z0-9_]+)\s*:\s*(.*)$")

REF_RE = re.compile(r"^([A-Za-z0-9_]+)\.([A-Za-z0-9_]+)$")
NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")
OUTPUT_RE = re.compile(r"^([A-Za-z0-9_]+)\s*(?:\((.*)\))?$")


# --- Token helpers ---


def split_top_level(text: str) -> List[str]:
    """Split on commas that are not inside parentheses; empty tokens are dropped."""
    parts: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text or "":
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    parts.append("".join(current).strip())
    return [p for p in parts if p]


def parse_arg(token: str, *, line: int = 0) -> Arg:
    """
    Classify one argument token.

    Numeric literals are tested before references, so ``1.5`` is a number and
    not a reference to field ``5`` of object ``1``.
    """
    if token.startswith("..."):
        m = REF_RE.match(token[3:].strip())
        if not m:
            raise FMSyntaxError(
                'Invalid spread token (expected "...ObjectName.field")', line=line, text=token
            )
        return SpreadArg(object=m.group(1), field=m.group(2), raw=token)
    if NUMBER_RE.match(token):
        return LiteralArg(value=float(token), raw=token)
    m = REF_RE.match(token)
    if m:
        return RefArg(name=m.group(1), field=m.group(2), raw=token)
    return LiteralArg(value=token, raw=token)


def parse_inline_value(value: str, *, line: int = 0) -> Any:
    value = value.strip()
    if value.endswith("%"):
        try:
            return float(value[:-1]) / 100.0
        except ValueError:
            raise FMSyntaxError("Invalid percentage", line=line, text=value) from None
    try:
        return float(value)
    except ValueError:
        return value.strip("\"'")


def parse_inline_assumptions(text: str, *, line: int = 0) -> Dict[str, Any]:
    """``churn: 5%, price: 20`` -> ``{"churn": 0.05, "price": 20.0}``."""
    out: Dict[str, Any] = {}
    for part in split_top_level(text):
        key, sep, value = part.partition(":")
        key = key.strip()
        if not sep or not key or not value.strip():
            raise FMSyntaxError("Invalid inline assumption (expected key: value)", line=line, text=part)
        out[key] = parse_inline_value(value, line=line)
    return out


def parse_outputs(text: Optional[str], *, line: int = 0) -> Tuple[Tuple[str, ...], Dict[str, Dict[str, Any]]]:
    names: List[str] = []
    inline: Dict[str, Dict[str, Any]] = {}
    for raw in split_top_level(text or ""):
        m = OUTPUT_RE.match(raw)
        if not m:
            raise FMSyntaxError("Invalid output alias", line=line, text=raw)
        names.append(m.group(1))
        if m.group(2) is not None and m.group(2).strip():
            inline[m.group(1)] = parse_inline_assumptions(m.group(2), line=line)
    return tuple(names), inline


def _split_trailing_comment(line: str) -> Tuple[str, Optional[str]]:
    idx = line.find("//")
    if idx == -1:
        return line, None
    return line[:idx].strip(), line[idx + 2:].strip()


# --- Parser ---


class _ParseState:
    def __init__(self) -> None:
        self.sections: List[Tuple[str, int, List[ObjectNode]]] = []
        self.objects: List[ObjectNode] = []
        self.metadata: Dict[str, str] = {}
        self.pending_comments: List[str] = []
        self.buffer: Optional[str] = None
        self.buffer_line = 0
        self.buffer_comments: List[str] = []

    @property
    def current_section(self) -> Optional[Tuple[str, int, List[ObjectNode]]]:
        return self.sections[-1] if self.sections else None

    def open_object(self, text: str, line: int, trailing: Optional[str]) -> None:
        self.flush()
        self.buffer = text
        self.buffer_line = line
        self.buffer_comments = self.pending_comments + ([trailing] if trailing else [])
        self.pending_comments = []

    def continue_object(self, text: str, trailing: Optional[str]) -> None:
        self.buffer = f"{self.buffer} {text}" if text else self.buffer
        if trailing:
            self.buffer_comments.append(trailing)

    def flush(self) -> None:
        if self.buffer is None:
            return
        text, line, comments = self.buffer, self.buffer_line, self.buffer_comments
        self.buffer, self.buffer_comments = None, []
        self.objects.append(self._build_node(text, line, comments))

    def _build_node(self, text: str, line: int, comments: List[str]) -> ObjectNode:
        m = OBJECT_RE.match(text)
        if not m:
            raise FMSyntaxError("Malformed object definition", line=line, text=text)
        section = self.current_section
        if section is None:
            raise FMSyntaxError("Object found before any section", line=line, text=text)

        name, fn_name, arg_text, out_text, trailing = m.groups()
        if trailing and trailing.strip():
            comments = comments + [trailing.strip()]
        args = tuple(parse_arg(tok, line=line) for tok in split_top_level(arg_text))
        outputs, inline = parse_outputs(out_text, line=line)

        node = ObjectNode(
            name=name,
            fn_name=fn_name,
            args=args,
            outputs=outputs,
            output_assumptions=inline,
            section=section[0],
            comment="\n".join(comments),
            line=line,
        )
        section[2].append(node)
        return node

    def to_ast(self) -> ModelAST:
        sections = tuple(Section(name=n, line=ln, objects=tuple(objs)) for n, ln, objs in self.sections)
        return ModelAST(sections=sections, objects=tuple(self.objects), metadata=dict(self.metadata))


def parse_fm(source: str) -> ModelAST:
    """
    Parse FM source text into a ModelAST (structure only).

    Parameters
    ----------
    source : str
        FM model text.

    Returns
    -------
    ModelAST
        Sections, a flat object list in source order, and metadata.

    Raises
    ------
    FMSyntaxError
        Object before any section, a line matching no construct, a malformed
        object definition or spread token.
    """
    state = _ParseState()
    scanning_metadata = True

    for lineno, raw in enumerate(source.splitlines(), start=1):
        line = raw.strip()

        if not line:
            state.flush()
            state.pending_comments = []
            continue

        if scanning_metadata:
            if line == "FM":
                continue
            if line.startswith("//"):
                meta = METADATA_RE.match(line)
                if meta:
                    state.metadata[meta.group(1)] = meta.group(2).strip()
                    continue
            else:
                scanning_metadata = False

        if SECTION_RE.match(line):
            state.flush()
            state.sections.append((SECTION_RE.match(line).group(1), lineno, []))
            state.pending_comments = []
            continue

        if line.startswith("//"):
            state.pending_comments.append(line[2:].strip())
            continue

        text, trailing = _split_trailing_comment(line)
        if OBJECT_START_RE.match(line):
            state.open_object(text, lineno, trailing)
        elif state.buffer is not None:
            state.continue_object(text, trailing)
        else:
            raise FMSyntaxError("Unexpected line", line=lineno, text=line)

    state.flush()
    ast = state.to_ast()
    logger.debug("Parsed %d objects in %d sections", len(ast.objects), len(ast.sections))
    return ast
