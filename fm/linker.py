"""
Linker — expand spreads, validate references, check argument routing.

Forward references are fine: the index already knows every symbol in the file.
Returns a new ModelAST; the parsed one is left untouched.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List

from core.errors import LinkError

from .ast import Arg, ModelAST, ObjectNode, RefArg, Section
from .indexer import SymbolIndex
from .routing import route_arguments

logger = logging.getLogger(__name__)


def _expand_args(node: ObjectNode, index: SymbolIndex) -> List[Arg]:
    linked: List[Arg] = []
    for arg in node.args:
        if arg.kind == "spread":
            target = index.objects_by_name.get(arg.object)
            if target is None:
                raise LinkError(
                    f'Spread references unknown object "{arg.object}" at line {node.line} in {node.name}. '
                    "Ensure the object exists (forward references are supported)."
                )
            if not target.outputs:
                raise LinkError(
                    f'Spread on "{arg.object}.{arg.field}" at line {node.line} but "{arg.object}" '
                    "declares no outputs to spread."
                )
            for alias in target.outputs:
                linked.append(
                    RefArg(name=alias, field=arg.field, raw=f"{alias}.{arg.field}", from_spread_of=arg.object)
                )
        elif arg.kind == "ref":
            if not index.has_symbol(arg.name):
                raise LinkError(
                    f'Unknown reference "{arg.raw or arg.name + "." + arg.field}" at line {node.line} '
                    f"in {node.name}. It must be an object name or an output alias."
                )
            linked.append(arg)
        else:
            linked.append(arg)
    return linked


def link_fm(ast: ModelAST, index: SymbolIndex) -> ModelAST:
    """
    Resolve every object's arguments against ``index``.

    Raises
    ------
    LinkError
        Spread of an unknown object or of an object with no declared outputs,
        unknown reference, or ambiguous argument fan-in.
    """
    linked_objects = []
    for node in ast.objects:
        linked = dataclasses.replace(node, args=tuple(_expand_args(node, index)))
        route_arguments(linked, len(index.outputs_by_object[linked.name]))
        linked_objects.append(linked)

    sections = tuple(
        Section(name=sec.name, line=sec.line, objects=tuple(n for n in linked_objects if n.section == sec.name))
        for sec in ast.sections
    )
    logger.debug("Linked %d objects", len(linked_objects))
    return ModelAST(sections=sections, objects=tuple(linked_objects), metadata=dict(ast.metadata))
