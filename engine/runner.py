"""
Execution engine — runs every output alias in dependency order.

For each alias:
  1. route the object's arguments to this output (shared routing rule)
  2. gather input series from the store (alias refs read one key, object refs
     sum that field over all the object's aliases, literals become constants)
  3. unwrap object-level and alias-level assumptions
  4. look up the type schema and the implementation function
  5. call the function and store its channels as ``"alias.channel"``
  6. apply user overrides to a copy of each stored series

A post-pass adds object-level roll-ups ``"objectName.channel"`` (the sum over
the object's aliases) so downstream consumers can read either level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

import numpy as np

from assumptions.model import ModelAssumptions, ObjectAssumptions, unwrap_fields
from core.config import ModelContext
from core.errors import EngineError
from core.schema import ObjectSchema
from core.utils import constant, zeros
from fm.ast import ModelAST, ObjectNode
from fm.indexer import SymbolIndex
from fm.routing import route_arguments
from functions.base import FunctionConfig, ModelFunction
from functions.registry import FN_REGISTRY

from .graph import OutputGraph

logger = logging.getLogger(__name__)

# alias -> channel -> month -> value
Overrides = Mapping[str, Mapping[str, Mapping[Any, float]]]


@dataclass(frozen=True)
class EngineResult:
    store: Dict[str, np.ndarray]
    by_alias: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    channels_by_alias: Dict[str, List[str]] = field(default_factory=dict)
    order: List[str] = field(default_factory=list)

    def series(self, key: str) -> np.ndarray:
        return self.store[key]


# --- Inputs ---


def _missing_input(key: str, where: str, arg_index: int, store: Mapping[str, np.ndarray], note: str = "") -> EngineError:
    have = ", ".join(store)
    return EngineError(f'Missing input "{key}"{note} for {where} (arg #{arg_index}). Store currently has: {have}')


def gather_inputs(
    node: ObjectNode,
    alias: str,
    arg_indices: List[int],
    index: SymbolIndex,
    store: Mapping[str, np.ndarray],
    months: int,
) -> List[np.ndarray]:
    where = f"{node.name}.{alias}"
    inputs: List[np.ndarray] = []
    for i in arg_indices:
        arg = node.args[i]
        if arg.kind == "literal":
            inputs.append(constant(arg.value, months) if arg.is_number else zeros(months))
            continue
        if arg.kind != "ref":
            raise EngineError(f"Unexpected {arg.kind} argument in {where}; was the model linked?", alias=alias)

        if arg.name in index.aliases:
            key = f"{arg.name}.{arg.field}"
            if key not in store:
                raise _missing_input(key, where, i, store)
            inputs.append(store[key])
        elif arg.name in index.objects_by_name:
            combined = zeros(months)
            for src_alias in index.outputs_by_object[arg.name]:
                key = f"{src_alias}.{arg.field}"
                if key not in store:
                    raise _missing_input(key, where, i, store, note=f' (expanded from object "{arg.name}")')
                combined += store[key]
            inputs.append(combined)
        else:
            raise EngineError(f'Unknown reference "{arg.name}.{arg.field}" for {where} (arg #{i}).', alias=alias)
    return inputs


# --- Results ---


def _month_index(key: Any) -> Optional[int]:
    if isinstance(key, bool):
        return None
    if isinstance(key, (int, np.integer)):
        return int(key)
    if isinstance(key, str) and key.strip().lstrip("-").isdigit():
        return int(key.strip())
    return None


def apply_overrides(series: np.ndarray, alias: str, channel: str, overrides: Optional[Overrides]) -> np.ndarray:
    """Copy of ``series`` with ``overrides[alias][channel]`` months replaced."""
    if not overrides:
        return series
    by_month = (overrides.get(alias) or {}).get(channel)
    if not by_month:
        return series
    out = np.array(series, dtype=float, copy=True)
    for key, value in by_month.items():
        m = _month_index(key)
        if m is None or not 0 <= m < len(out):
            logger.warning("Ignoring override %s.%s[%r]: month out of range", alias, channel, key)
            continue
        out[m] = float(value)
    return out


def _as_month_series(value: Any, months: int, what: str, alias: str) -> np.ndarray:
    arr = np.asarray(value, dtype=float)
    if arr.shape != (months,):
        raise EngineError(f"{what} must be a series of {months} months, got shape {arr.shape}", alias=alias)
    return arr


def select_channels(
    result: Mapping[str, Any],
    declared: List[str],
    alias: str,
    node: ObjectNode,
    months: int,
) -> Dict[str, np.ndarray]:
    """Map a function's return onto declared channels."""
    if any(name in declared for name in result):
        return {
            name: _as_month_series(series, months, f"{node.name}.{alias} channel {name!r}", alias)
            for name, series in result.items()
            if name in declared
        }

    series = result.get(alias)
    if series is None:
        series = result.get("val")
    if series is None:
        raise EngineError(
            f'Function for "{node.name}" did not return any declared channels ({", ".join(declared)}) '
            f"and also did not return an alias series ({alias}). It returned: {', '.join(result)}",
            alias=alias,
        )
    if len(declared) != 1:
        raise EngineError(
            f'Function for "{node.name}" returned an unnamed series, but "{node.fn_name}" declares multiple '
            f"channels ({', '.join(declared)}). Return channel-named data from the function instead.",
            alias=alias,
        )
    return {declared[0]: _as_month_series(series, months, f"{node.name}.{alias}", alias)}


# --- Engine ---


def run_engine(
    ast: ModelAST,
    index: SymbolIndex,
    graph: OutputGraph,
    assumptions: ModelAssumptions,
    context: ModelContext,
    schema: ObjectSchema,
    *,
    registry: Optional[Mapping[str, ModelFunction]] = None,
    overrides: Optional[Overrides] = None,
) -> EngineResult:
    """
    Execute a linked model.

    Parameters
    ----------
    ast, index, graph
        Linked AST, its symbol index and output graph.
    assumptions : ModelAssumptions
        Materialized assumptions (see ``assumptions.build_model_assumptions``).
    context : ModelContext
        Horizon.
    schema : ObjectSchema
        Object types: implementation name and declared channels.
    registry : mapping, optional
        Implementation name -> function (default FN_REGISTRY).
    overrides : mapping, optional
        ``{alias: {channel: {month: value}}}`` applied after computation.

    Returns
    -------
    EngineResult

    Raises
    ------
    EngineError
        Missing input, unknown type / function, bad function return.
    """
    registry = FN_REGISTRY if registry is None else registry
    months = context.months
    linked_by_name = {n.name: n for n in ast.objects}

    store: Dict[str, np.ndarray] = {}
    by_alias: Dict[str, Dict[str, Any]] = {}
    channels_by_alias: Dict[str, List[str]] = {}

    for alias in graph.order:
        obj_name = graph.owner(alias)
        node = linked_by_name.get(obj_name)
        if node is None:
            raise EngineError(f'No AST node for object "{obj_name}"', alias=alias)

        outputs = list(index.outputs_by_object[obj_name])
        output_index = outputs.index(alias)
        routes = route_arguments(node, len(outputs))
        inputs = gather_inputs(node, alias, routes[output_index], index, store, months)

        obj_ass = assumptions.get(obj_name) or ObjectAssumptions()
        object_level = unwrap_fields(obj_ass.object)
        output_level = unwrap_fields(obj_ass.outputs.get(alias, {}))

        type_schema = schema.get(node.fn_name)
        if type_schema is None or not type_schema.channels:
            raise EngineError(
                f'Object type "{node.fn_name}" has no channels in the object schema (used by {obj_name}).',
                alias=alias,
            )
        impl = type_schema.impl_name(node.fn_name)
        fn = registry.get(impl)
        if fn is None:
            raise EngineError(f'Unknown function "{impl}" (from "{node.fn_name}")', alias=alias)

        cfg = FunctionConfig(
            object=object_level,
            output=output_level,
            channels=type_schema.channels,
            output_names=[alias],
            output_index=output_index,
        )
        result = fn(context, inputs, cfg)
        if not isinstance(result, Mapping):
            raise EngineError(f'Function "{impl}" must return a mapping of channel -> series', alias=alias)

        stored = select_channels(result, type_schema.channel_names, alias, node, months)
        for channel, series in stored.items():
            store[f"{alias}.{channel}"] = apply_overrides(series, alias, channel, overrides)
        channels_by_alias[alias] = list(stored)
        by_alias[alias] = dict(result)
        logger.debug("%s.%s via %s -> %s", obj_name, alias, impl, list(stored))

    for obj_name, aliases in index.outputs_by_object.items():
        totals: Dict[str, np.ndarray] = {}
        for alias in aliases:
            for channel in channels_by_alias.get(alias, ()):
                totals.setdefault(channel, zeros(months))
                totals[channel] += store[f"{alias}.{channel}"]
        for channel, total in totals.items():
            key = f"{obj_name}.{channel}"
            if key not in store:
                store[key] = total

    return EngineResult(store=store, by_alias=by_alias, channels_by_alias=channels_by_alias, order=list(graph.order))
