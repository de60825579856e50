"""
FM language front end — parse, index and link model source text.
"""

from typing import Tuple

from .ast import LiteralArg, ModelAST, ObjectNode, RefArg, Section, SpreadArg
from .indexer import AliasEntry, SymbolIndex, build_index
from .parser import parse_fm
from .routing import route_arguments
from .linker import link_fm


def parse_and_link(source: str) -> Tuple[ModelAST, SymbolIndex]:
    """Parse, index and link ``source``; returns the linked AST and its index."""
    ast = parse_fm(source)
    index = build_index(ast)
    return link_fm(ast, index), index


__all__ = [
    "ModelAST",
    "ObjectNode",
    "Section",
    "RefArg",
    "SpreadArg",
    "LiteralArg",
    "AliasEntry",
    "SymbolIndex",
    "build_index",
    "parse_fm",
    "route_arguments",
    "link_fm",
    "parse_and_link",
]
