"""
Timing shifts: move each month's value later (Delay) or earlier (Advance).
Values shifted past either end of the horizon are dropped.
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np

from core.config import ModelContext
from core.utils import zeros

from .base import FunctionConfig, combined_input


def shift(src: np.ndarray, offsets: np.ndarray) -> np.ndarray:
    """out[m + offsets[m]] += src[m], dropping targets outside [0, months)."""
    months = len(src)
    out = zeros(months)
    for m in range(months):
        target = m + int(np.floor(offsets[m]))
        if 0 <= target < months:
            out[target] += src[m]
    return out


def delay(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    months = ctx.months
    d = cfg.series("delayMonths", months)
    return {cfg.alias: shift(combined_input(inputs, months), d)}


def advance(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    months = ctx.months
    d = cfg.series("advanceMonths", months)
    return {cfg.alias: shift(combined_input(inputs, months), -d)}
