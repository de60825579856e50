"""
Model assumptions — an immutable value mapping object name to its fields.

Every edit goes through ``update_assumption`` and returns a NEW mapping in
which only the edited field is rebuilt; every other field object is shared
with the previous value. Field values are read-only numpy arrays.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from core.config import ModelContext
from core.schema import FieldDescriptor, ObjectSchema
from fm.ast import ModelAST
from fm.indexer import SymbolIndex

from .materialize import MaterializedValue, RawAssumption, materialize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssumptionField:
    descriptor: FieldDescriptor
    raw: RawAssumption
    value: MaterializedValue

    @property
    def name(self) -> str:
        return self.descriptor.name


@dataclass(frozen=True)
class ObjectAssumptions:
    object: Dict[str, AssumptionField] = field(default_factory=dict)
    outputs: Dict[str, Dict[str, AssumptionField]] = field(default_factory=dict)


ModelAssumptions = Dict[str, ObjectAssumptions]

_UNSET: Any = object()


def make_field(descriptor: FieldDescriptor, raw: RawAssumption, context: ModelContext) -> AssumptionField:
    return AssumptionField(descriptor=descriptor, raw=raw, value=materialize(descriptor, raw, context))


_TRUE_WORDS = ("true", "yes", "1")
_FALSE_WORDS = ("false", "no", "0")


def _inline_bool(value: Any) -> Optional[bool]:
    """Inline flag value (`true`, `no`, `1`, ...) as a bool; None if unrecognised."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        if value in (0, 1):
            return bool(value)
        return None
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


def _seeded_raw(descriptor: FieldDescriptor, inline: Mapping[str, Any], where: str) -> RawAssumption:
    if descriptor.name not in inline:
        return RawAssumption.from_default(descriptor)
    value = inline[descriptor.name]
    if descriptor.is_boolean:
        flag = _inline_bool(value)
        if flag is None:
            logger.warning("Ignoring non-boolean inline value %r for %s.%s", value, where, descriptor.name)
            return RawAssumption.from_default(descriptor)
        return RawAssumption(single=flag)
    if isinstance(value, str):
        logger.warning("Ignoring non-numeric inline value %r for %s.%s", value, where, descriptor.name)
        return RawAssumption.from_default(descriptor)
    return RawAssumption(single=value)


# ========= Build =========


def build_model_assumptions(
    ast: ModelAST,
    index: SymbolIndex,
    schema: ObjectSchema,
    context: ModelContext,
) -> ModelAssumptions:
    """
    Default assumptions for every object of a linked model.

    Object-level fields come from ``schema[type].assumptions.object``; each
    alias of the object gets its own copy of the output-level fields, seeded
    from inline ``alias(key: value)`` values where given. Objects whose type is
    not in the schema get empty assumptions.
    """
    result: ModelAssumptions = {}
    for node in ast.objects:
        type_schema = schema.get(node.fn_name)
        if type_schema is None:
            result[node.name] = ObjectAssumptions()
            continue

        object_fields = {
            d.name: make_field(d, RawAssumption.from_default(d), context) for d in type_schema.assumptions.object
        }
        outputs: Dict[str, Dict[str, AssumptionField]] = {}
        for alias in index.outputs_by_object.get(node.name, (node.name,)):
            inline = node.output_assumptions.get(alias, {})
            known = {d.name for d in type_schema.assumptions.output}
            for key in inline:
                if key not in known:
                    logger.warning("Unknown inline assumption %r on %s (%s)", key, alias, node.fn_name)
            outputs[alias] = {
                d.name: make_field(d, _seeded_raw(d, inline, alias), context) for d in type_schema.assumptions.output
            }
        result[node.name] = ObjectAssumptions(object=object_fields, outputs=outputs)
    return result


# ========= Update =========


def _edit_raw(
    raw: RawAssumption,
    *,
    single: Any,
    annual: Any,
    annual_index: Any,
    growth: Any,
    monthly: Any,
    month_index: Any,
    smoothing: Any,
    date_range: Any,
    seasonal: Any,
) -> RawAssumption:
    changes: Dict[str, Any] = {}
    if single is not _UNSET:
        changes["single"] = single
    if annual is not _UNSET:
        changes["annual"] = annual
    if annual_index is not _UNSET:
        i, v = annual_index
        years = list(changes.get("annual", raw.annual) or ())
        if i >= len(years):
            years.extend([None] * (i + 1 - len(years)))
        years[i] = v
        changes["annual"] = years
    if growth is not _UNSET:
        changes["growth"] = growth
    if monthly is not _UNSET:
        changes["monthly"] = monthly
    if month_index is not _UNSET:
        m, v = month_index
        overrides = list(changes.get("monthly", raw.monthly) or ())
        if m >= len(overrides):
            overrides.extend([None] * (m + 1 - len(overrides)))
        overrides[m] = v
        changes["monthly"] = overrides
    if smoothing is not _UNSET:
        changes["smoothing"] = smoothing
    if date_range is not _UNSET:
        changes["date_range"] = date_range
    if seasonal is not _UNSET:
        changes["seasonal"] = seasonal
    return dataclasses.replace(raw, **changes)


def update_assumption(
    assumptions: ModelAssumptions,
    object_name: str,
    field_name: str,
    context: ModelContext,
    *,
    alias: Optional[str] = None,
    single: Any = _UNSET,
    annual: Any = _UNSET,
    annual_index: Tuple[int, Optional[float]] = _UNSET,
    growth: Any = _UNSET,
    monthly: Any = _UNSET,
    month_index: Tuple[int, Optional[float]] = _UNSET,
    smoothing: Any = _UNSET,
    date_range: Any = _UNSET,
    seasonal: Any = _UNSET,
) -> ModelAssumptions:
    """
    Return a new assumptions value with one field's raw spec edited.

    Parameters
    ----------
    assumptions : ModelAssumptions
        Current value; never mutated.
    object_name : str
        Owning object.
    field_name : str
        Field to edit.
    context : ModelContext
        Horizon used to re-materialize the edited field.
    alias : str, optional
        Output alias for output-level fields; None targets object-level fields.
    single, annual, growth, monthly, smoothing, date_range, seasonal
        Replace that part of the raw spec (None clears it).
    annual_index, month_index : (index, value)
        Set a single year / month entry.

    Raises
    ------
    KeyError
        Unknown object, alias or field.
    """
    obj = assumptions.get(object_name)
    if obj is None:
        raise KeyError(f"Unknown object {object_name!r}")

    if alias is None:
        group = obj.object
        where = object_name
    else:
        if alias not in obj.outputs:
            raise KeyError(f"Unknown output alias {alias!r} on {object_name!r}")
        group = obj.outputs[alias]
        where = f"{object_name}/{alias}"
    if field_name not in group:
        raise KeyError(f"Unknown assumption field {field_name!r} on {where}")

    current = group[field_name]
    raw = _edit_raw(
        current.raw,
        single=single,
        annual=annual,
        annual_index=annual_index,
        growth=growth,
        monthly=monthly,
        month_index=month_index,
        smoothing=smoothing,
        date_range=date_range,
        seasonal=seasonal,
    )
    new_group = {**group, field_name: make_field(current.descriptor, raw, context)}

    if alias is None:
        new_obj = ObjectAssumptions(object=new_group, outputs=obj.outputs)
    else:
        new_obj = ObjectAssumptions(object=obj.object, outputs={**obj.outputs, alias: new_group})
    return {**assumptions, object_name: new_obj}


def recalculate_all(assumptions: ModelAssumptions, context: ModelContext) -> ModelAssumptions:
    """Re-materialize every field against ``context`` (e.g. after a horizon change)."""

    def rebuild(fields: Mapping[str, AssumptionField]) -> Dict[str, AssumptionField]:
        return {name: make_field(f.descriptor, f.raw, context) for name, f in fields.items()}

    return {
        name: ObjectAssumptions(
            object=rebuild(obj.object),
            outputs={alias: rebuild(fields) for alias, fields in obj.outputs.items()},
        )
        for name, obj in assumptions.items()
    }


def unwrap_fields(fields: Mapping[str, AssumptionField]) -> Dict[str, MaterializedValue]:
    """``{name: AssumptionField}`` -> ``{name: value}`` for the engine."""
    return {name: f.value for name, f in fields.items()}
