from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd
from dateutil.relativedelta import relativedelta


def zeros(months: int) -> np.ndarray:
    return np.zeros(int(months), dtype=float)


def constant(value: float, months: int) -> np.ndarray:
    return np.full(int(months), float(value), dtype=float)


def as_series(value, months: int, *, default: float = 0.0) -> np.ndarray:
    """
    Coerce an assumption value (scalar, list or array) to a fresh float array of
    length ``months``. Short inputs are padded with their last value.
    """
    if value is None:
        return constant(default, months)
    if np.isscalar(value):
        return constant(float(value), months)
    arr = np.asarray(value, dtype=float).reshape(-1)
    if arr.size == 0:
        return constant(default, months)
    if arr.size >= months:
        return arr[:months].copy()
    pad = np.full(months - arr.size, arr[-1], dtype=float)
    return np.concatenate([arr, pad])


def first_value(value, default: Optional[float] = 0.0) -> Optional[float]:
    """First element of an array-like assumption, or the scalar itself."""
    if value is None:
        return default
    if np.isscalar(value):
        return float(value)
    arr = np.asarray(value, dtype=float).reshape(-1)
    return float(arr[0]) if arr.size else default


def running_total(values: np.ndarray) -> np.ndarray:
    return np.cumsum(np.asarray(values, dtype=float))


def sum_series(series: Iterable[np.ndarray], months: int) -> np.ndarray:
    out = zeros(months)
    for s in series:
        out += s
    return out


def month_starts(start_date: pd.Timestamp, n_months: int) -> pd.DatetimeIndex:
    """
    Month-start dates for projection months 0..n-1.
    A mid-month start date is snapped back to the first of its month.
    """
    first = pd.Timestamp(start_date).to_period("M").to_timestamp(how="start")
    return pd.DatetimeIndex([first + relativedelta(months=k) for k in range(n_months)])


def period_labels(n_periods: int, start_date: Optional[pd.Timestamp] = None, *, prefix: str = "M") -> List:
    """Column labels for exported series: month-start dates if known, else M1..Mn."""
    if start_date is not None and prefix == "M":
        return list(month_starts(start_date, n_periods))
    return [f"{prefix}{i + 1}" for i in range(n_periods)]


_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def format_name(name: str) -> str:
    """'upworkModelRev' -> 'Upwork Model Rev'."""
    words: Sequence[str] = _CAMEL_BOUNDARY.sub(" ", name.replace("_", " ")).split()
    return " ".join(w[:1].upper() + w[1:] for w in words)
