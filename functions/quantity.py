"""
Quantity functions: scale, divide, start-only amounts, one-off pulses, sums.
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np

from core.config import ModelContext
from core.utils import running_total, zeros

from .base import FunctionConfig, active_mask, combined_input


def multiply(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    """out[m] = input[m] * factor[m] from startMonth on, else 0."""
    months = ctx.months
    base = combined_input(inputs, months)
    factor = cfg.series("factor", months, default=1.0)
    out = np.where(active_mask(months, cfg.month("startMonth")), base * factor, 0.0)
    return {cfg.alias: out}


def divide(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    """out[m] = input[m] / factor[m] from startMonth on; 0 where factor is 0."""
    months = ctx.months
    base = combined_input(inputs, months)
    factor = cfg.series("factor", months, default=1.0)
    out = np.zeros(months, dtype=float)
    ok = active_mask(months, cfg.month("startMonth")) & (factor != 0)
    out[ok] = base[ok] / factor[ok]
    return {cfg.alias: out}


def quant_start(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    """The ``amount`` assumption itself, zeroed before startMonth."""
    months = ctx.months
    amount = cfg.series("amount", months)
    out = np.where(active_mask(months, cfg.month("startMonth")), amount, 0.0)
    return {cfg.alias: out}


def quant_pulse(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    """
    ``amount`` in the single month ``month`` (0-based), zero elsewhere, plus the
    running total as ``cum``. A month outside the horizon gives zeros.
    """
    months = ctx.months
    out = zeros(months)
    target = cfg.month("month")
    if 0 <= target < months:
        out[target] = cfg.series("amount", months)[target]
    return {"val": out, "cum": running_total(out)}


def sum_inputs(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    return {"val": combined_input(inputs, ctx.months)}


def setup(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    return {"val": zeros(ctx.months)}
