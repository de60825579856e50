"""
Staffing: headcount and salary cost.

  StaffDiv   heads = activity / productivity  (0 when productivity is 0)
  StaffTeam  heads = headCount assumption
  StaffRole  heads = 1

In every case ``cost = heads * salary`` and both are 0 before startMonth.
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np

from core.config import ModelContext

from .base import FunctionConfig, active_mask, combined_input


def _staff(heads: np.ndarray, cfg: FunctionConfig, months: int) -> Dict[str, np.ndarray]:
    live = active_mask(months, cfg.month("startMonth"))
    heads = np.where(live, heads, 0.0)
    return {"heads": heads, "cost": heads * cfg.series("salary", months)}


def staff_div(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    months = ctx.months
    activity = combined_input(inputs, months)
    productivity = cfg.series("productivity", months, default=1.0)
    heads = np.zeros(months, dtype=float)
    ok = productivity != 0
    heads[ok] = activity[ok] / productivity[ok]
    return _staff(heads, cfg, months)


def staff_team(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    return _staff(cfg.series("headCount", ctx.months), cfg, ctx.months)


def staff_role(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    return _staff(np.ones(ctx.months, dtype=float), cfg, ctx.months)
