"""
Symbol index — every object name and every output alias, built once from the
parsed AST and read-only afterwards.

Objects with no declared outputs get one synthetic alias equal to their own
name, so every object contributes at least one node to the output graph.
Object names and aliases share a single namespace.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from core.errors import LinkError

from .ast import ModelAST, ObjectNode


@dataclass(frozen=True)
class AliasEntry:
    object_name: str
    node: ObjectNode
    synthetic: bool = False


@dataclass(frozen=True)
class SymbolIndex:
    objects_by_name: Dict[str, ObjectNode] = field(default_factory=dict)
    aliases: Dict[str, AliasEntry] = field(default_factory=dict)
    outputs_by_object: Dict[str, Tuple[str, ...]] = field(default_factory=dict)

    def has_symbol(self, name: str) -> bool:
        return name in self.objects_by_name or name in self.aliases

    def owner_of(self, alias: str) -> ObjectNode:
        return self.aliases[alias].node

    def alias_order(self) -> List[str]:
        return list(self.aliases)


def build_index(ast: ModelAST) -> SymbolIndex:
    """
    Register objects and aliases in source order.

    Raises
    ------
    LinkError
        Duplicate object name, duplicate alias across objects, or an alias that
        collides with a different object's name.
    """
    objects_by_name: Dict[str, ObjectNode] = {}
    aliases: Dict[str, AliasEntry] = {}
    outputs_by_object: Dict[str, Tuple[str, ...]] = {}

    for node in ast.objects:
        prev = objects_by_name.get(node.name)
        if prev is not None:
            raise LinkError(
                f'Duplicate object name "{node.name}" at line {node.line} (already at line {prev.line}).'
            )
        objects_by_name[node.name] = node

    for node in ast.objects:
        synthetic = not node.outputs
        outs = (node.name,) if synthetic else tuple(node.outputs)
        outputs_by_object[node.name] = outs

        for alias in outs:
            prev_entry = aliases.get(alias)
            if prev_entry is not None:
                raise LinkError(
                    f'Output alias "{alias}" from {node.name} (line {node.line}) conflicts with '
                    f"{prev_entry.object_name} (line {prev_entry.node.line})."
                )
            other = objects_by_name.get(alias)
            if other is not None and other.name != node.name:
                raise LinkError(
                    f'Output alias "{alias}" from {node.name} (line {node.line}) conflicts with '
                    f"object {other.name} (line {other.line})."
                )
            aliases[alias] = AliasEntry(object_name=node.name, node=node, synthetic=synthetic)

    return SymbolIndex(objects_by_name=objects_by_name, aliases=aliases, outputs_by_object=outputs_by_object)
