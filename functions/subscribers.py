"""
Subscriber retention.

Active customers carry over month to month, lose ``churn`` of last month's
base and gain the month's additions:

    churned[m] = active[m-1] * churn[m]
    active[m]  = max(0, active[m-1] + added[m] - churned[m])

Before ``startMonth`` both series are 0 and the carried base is reset, so
additions made before the start are never retained.
"""

from __future__ import annotations

from typing import Dict, Sequence, Tuple

import numpy as np

from core.config import ModelContext

from .base import FunctionConfig, combined_input


def retain(added: np.ndarray, churn: np.ndarray, start_month: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Run the retention recurrence.

    Parameters
    ----------
    added : np.ndarray
        New customers per month.
    churn : np.ndarray
        Monthly churn rate per month (0.1 = 10%).
    start_month : int
        First active month, 0-based.

    Returns
    -------
    (active, churned)
    """
    months = len(added)
    active = np.zeros(months, dtype=float)
    churned = np.zeros(months, dtype=float)

    prev = 0.0
    for m in range(months):
        if m < start_month:
            prev = 0.0
            continue
        lost = prev * churn[m]
        now = max(0.0, prev + added[m] - lost)
        active[m] = now
        churned[m] = lost
        prev = now
    return active, churned


def sub_retain(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    months = ctx.months
    active, churned = retain(
        combined_input(inputs, months),
        cfg.series("churn", months),
        cfg.month("startMonth"),
    )
    return {"act": active, "chu": churned}


def sub_mth(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    """Retention plus monthly subscription revenue ``rev = act * price``."""
    months = ctx.months
    active, churned = retain(
        combined_input(inputs, months),
        cfg.series("churn", months),
        cfg.month("startMonth"),
    )
    return {"act": active, "chu": churned, "rev": active * cfg.series("price", months)}
