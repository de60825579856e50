"""
Output-level dependency graph.

Nodes are output aliases, not objects: two outputs of the same object may sit
at different depths, so one output can feed a sibling's input without that
counting as a cycle. Edges come from the same argument routing the engine
uses, which keeps the computed order and the actual reads in agreement.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional

from core.errors import CycleError
from fm.ast import ModelAST
from fm.indexer import SymbolIndex
from fm.routing import route_arguments

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputGraph:
    nodes: List[str]
    order: List[str]
    deps: Dict[str, List[str]]
    dependents: Dict[str, List[str]]
    alias_owner: Dict[str, str]

    def owner(self, alias: str) -> str:
        return self.alias_owner[alias]


def _producers(arg, index: SymbolIndex) -> List[str]:
    if arg.kind != "ref":
        return []
    if arg.name in index.aliases:
        return [arg.name]
    return list(index.outputs_by_object.get(arg.name, ()))


def _append_unique(items: List[str], value: str) -> None:
    if value not in items:
        items.append(value)


def find_cycle(adj: Dict[str, List[str]], candidates: List[str]) -> List[str]:
    """
    A concrete cycle ``[a, b, ..., a]`` among ``candidates`` (iterative DFS).
    Empty list if none is found.
    """
    WHITE, GREY, BLACK = 0, 1, 2
    allowed = set(candidates)
    color = {n: WHITE for n in candidates}

    for root in candidates:
        if color[root] != WHITE:
            continue
        path: List[str] = [root]
        iters = [iter(adj.get(root, ()))]
        color[root] = GREY
        while iters:
            nxt: Optional[str] = None
            for child in iters[-1]:
                if child in allowed and color[child] != BLACK:
                    nxt = child
                    break
            if nxt is None:
                color[path.pop()] = BLACK
                iters.pop()
                continue
            if color[nxt] == GREY:
                start = path.index(nxt)
                return path[start:] + [nxt]
            color[nxt] = GREY
            path.append(nxt)
            iters.append(iter(adj.get(nxt, ())))
    return []


def build_output_graph(ast: ModelAST, index: SymbolIndex) -> OutputGraph:
    """
    Build alias-level dependencies of a linked model and order them.

    Parameters
    ----------
    ast : ModelAST
        Linked AST (spreads already expanded).
    index : SymbolIndex
        Index of the same model.

    Returns
    -------
    OutputGraph
        ``order`` is a stable topological order (Kahn, FIFO, seeded in
        index order).

    Raises
    ------
    CycleError
        If some outputs depend on each other; ``.cycle`` holds one cycle path.
    LinkError
        Ambiguous argument fan-in (from the shared routing rule).
    """
    nodes = index.alias_order()
    alias_owner = {alias: entry.object_name for alias, entry in index.aliases.items()}
    deps: Dict[str, List[str]] = {a: [] for a in nodes}

    for node in ast.objects:
        consumers = list(index.outputs_by_object.get(node.name, ()))
        if not consumers:
            continue
        routes = route_arguments(node, len(consumers))
        for consumer, arg_indices in zip(consumers, routes):
            for i in arg_indices:
                for producer in _producers(node.args[i], index):
                    _append_unique(deps[consumer], producer)

    dependents: Dict[str, List[str]] = {a: [] for a in nodes}
    for consumer in nodes:
        for producer in deps[consumer]:
            _append_unique(dependents[producer], consumer)

    in_degree = {a: len(deps[a]) for a in nodes}
    queue = deque(a for a in nodes if in_degree[a] == 0)
    order: List[str] = []
    while queue:
        alias = queue.popleft()
        order.append(alias)
        for child in dependents[alias]:
            in_degree[child] -= 1
            if in_degree[child] == 0:
                queue.append(child)

    if len(order) != len(nodes):
        done = set(order)
        leftover = [a for a in nodes if a not in done]
        raise CycleError(find_cycle(dependents, leftover))

    logger.debug("Output graph: %d nodes, order %s", len(nodes), order)
    return OutputGraph(nodes=nodes, order=order, deps=deps, dependents=dependents, alias_owner=alias_owner)
