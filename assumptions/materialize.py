"""
Assumption materializer — raw specification to monthly series.

A field's raw specification can combine several inputs. Precedence is fixed:

  1. boolean field       -> the raw scalar as a bool (no series)
  2. growth rate set     -> base compounded monthly at (1 + g) ** (1/12)
  3. annual values set   -> each year's value over its 12 months (optionally
                            smoothed linearly towards the next year)
  4. single value        -> broadcast over every month
  5. seasonal pattern    -> month m scaled by seasonal[m % 12]
  6. monthly overrides   -> non-None entries replace the computed value
  7. date range          -> months outside [start, end] zeroed

Each step only applies when the field's descriptor supports it. The result is
a new read-only float64 array; identical inputs give bit-identical output.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple, Union

import numpy as np

from core.config import ModelContext
from core.schema import FieldDescriptor

MaterializedValue = Union[np.ndarray, bool]


def _optional_tuple(values: Optional[Sequence[Any]]) -> Optional[Tuple[Any, ...]]:
    if values is None:
        return None
    return tuple(None if v is None else float(v) for v in values)


@dataclass(frozen=True)
class RawAssumption:
    """
    Raw (user-facing) specification of one assumption field.

    annual   : one value per year; None entries count as 0
    growth   : annual growth rate, e.g. 0.2 for +20% a year
    monthly  : per-month overrides; None keeps the computed value
    date_range : (start, end) 0-based inclusive month indices; end None = horizon
    seasonal : 12 multipliers, January-relative to month 0
    """

    single: Any = None
    annual: Optional[Tuple[Optional[float], ...]] = None
    growth: Optional[float] = None
    monthly: Optional[Tuple[Optional[float], ...]] = None
    smoothing: bool = False
    date_range: Optional[Tuple[int, Optional[int]]] = None
    seasonal: Optional[Tuple[float, ...]] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "annual", _optional_tuple(self.annual))
        object.__setattr__(self, "monthly", _optional_tuple(self.monthly))
        if self.growth is not None:
            object.__setattr__(self, "growth", float(self.growth))
            if self.growth < -1.0:
                raise ValueError(f"growth must be >= -1, got {self.growth}")
        object.__setattr__(self, "smoothing", bool(self.smoothing))

        if self.seasonal is not None:
            seasonal = tuple(float(v) for v in self.seasonal)
            if len(seasonal) != 12:
                raise ValueError(f"seasonal needs 12 multipliers, got {len(seasonal)}")
            object.__setattr__(self, "seasonal", seasonal)

        if self.date_range is not None:
            start, end = self.date_range
            start = int(start)
            end = None if end is None else int(end)
            if start < 0 or (end is not None and end < start):
                raise ValueError(f"invalid date_range {self.date_range!r}")
            object.__setattr__(self, "date_range", (start, end))

    @classmethod
    def from_default(cls, descriptor: FieldDescriptor) -> "RawAssumption":
        return cls(single=descriptor.default)


def _as_float(value: Any, fallback: float = 0.0) -> float:
    if value is None:
        return fallback
    return float(value)


def _base_value(descriptor: FieldDescriptor, raw: RawAssumption) -> float:
    """Scalar starting point: single value, else first annual value, else default."""
    if raw.single is not None:
        return float(raw.single)
    if raw.annual and raw.annual[0] is not None:
        return float(raw.annual[0])
    return _as_float(descriptor.default)


def _growth_series(base: float, growth: float, months: int) -> np.ndarray:
    steps = np.full(months, (1.0 + growth) ** (1.0 / 12.0), dtype=float)
    steps[0] = 1.0
    return base * np.cumprod(steps)


def _annual_series(annual: Tuple[Optional[float], ...], months: int, smoothing: bool) -> np.ndarray:
    years = np.array([0.0 if v is None else v for v in annual], dtype=float)
    last = len(years) - 1
    out = np.empty(months, dtype=float)
    for m in range(months):
        y = min(m // 12, last)
        out[m] = years[y]
        if smoothing and m // 12 < last:
            k = m % 12
            out[m] = years[y] + (years[y + 1] - years[y]) * k / 12.0
    return out


def materialize(descriptor: FieldDescriptor, raw: RawAssumption, context: ModelContext) -> MaterializedValue:
    """
    Turn a raw specification into the value the engine consumes.

    Parameters
    ----------
    descriptor : FieldDescriptor
        Schema entry for the field (type, default, supported inputs).
    raw : RawAssumption
        The raw specification.
    context : ModelContext
        Horizon; the result has ``context.months`` entries.

    Returns
    -------
    np.ndarray (read-only, float64) or bool for boolean fields.
    """
    if descriptor.is_boolean:
        value = raw.single if raw.single is not None else descriptor.default
        return bool(value)

    months = context.months
    supports = descriptor.supports

    if supports.growth and raw.growth is not None:
        out = _growth_series(_base_value(descriptor, raw), raw.growth, months)
    elif supports.annual and raw.annual:
        out = _annual_series(raw.annual, months, bool(supports.smoothing and raw.smoothing))
    else:
        single = raw.single if supports.single else None
        value = single if single is not None else _as_float(descriptor.default)
        out = np.full(months, float(value), dtype=float)

    if supports.seasonal and raw.seasonal is not None:
        pattern = np.asarray(raw.seasonal, dtype=float)
        out = out * pattern[np.arange(months) % 12]

    if supports.monthly and raw.monthly:
        for m, override in enumerate(raw.monthly[:months]):
            if override is not None:
                out[m] = override

    if supports.date_range and raw.date_range is not None:
        start, end = raw.date_range
        idx = np.arange(months)
        outside = idx < start
        if end is not None:
            outside |= idx > end
        out[outside] = 0.0

    out.flags.writeable = False
    return out
