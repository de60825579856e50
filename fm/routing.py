"""
Argument-to-output routing.

One rule decides which arguments of an object feed which of its outputs. The
linker uses it to reject ambiguous definitions, the graph builder to draw
edges and the engine to gather inputs, so all three always agree.
"""

from __future__ import annotations

from typing import List

from core.errors import LinkError

from .ast import ObjectNode


def has_spread(node: ObjectNode) -> bool:
    """True if any argument is (or came from) a ``...Object.field`` spread."""
    for arg in node.args:
        if arg.kind == "spread":
            return True
        if arg.kind == "ref" and arg.from_spread_of is not None:
            return True
    return False


def route_arguments(node: ObjectNode, n_outputs: int) -> List[List[int]]:
    """
    Argument indices feeding each output of ``node``.

    Parameters
    ----------
    node : ObjectNode
        Linked (or parsed) object.
    n_outputs : int
        Number of aliases the object has (synthetic alias included).

    Returns
    -------
    List[List[int]]
        ``routes[i]`` lists the argument indices consumed by output ``i``.

    Rules
    -----
    * one output takes every argument;
    * several outputs, no spread and more arguments than outputs is ambiguous
      and raises LinkError;
    * otherwise output i takes argument i, outputs past the last argument
      reuse the last argument, and the last output also takes every argument
      at index >= n_outputs.
    """
    n_args = len(node.args)
    n_outputs = max(int(n_outputs), 1)

    if n_outputs == 1:
        return [list(range(n_args))]

    if n_args > n_outputs and not has_spread(node):
        raise LinkError(
            f"{node.name} (line {node.line}) has {n_args} arguments for {n_outputs} outputs; "
            "cannot decide which argument feeds which output. Use one output, one argument "
            "per output, or a spread argument."
        )

    if n_args == 0:
        return [[] for _ in range(n_outputs)]

    routes = [[min(i, n_args - 1)] for i in range(n_outputs)]
    routes[-1].extend(range(n_outputs, n_args))
    return routes
