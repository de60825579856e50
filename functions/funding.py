"""
Debt funding — a single interest-only loan.

    raised[startMonth]        = amount
    bal[m]                    = amount for startMonth <= m < startMonth + term
    int[m]                    = bal[m] * rate          (rate is monthly)
    repaid[startMonth + term] = amount
    debtMove                  = raised - repaid

A term of 0 or less means the loan is never repaid within the horizon.
"""

from __future__ import annotations

from typing import Dict, Sequence

import numpy as np

from core.config import ModelContext
from core.utils import zeros

from .base import FunctionConfig


def fund_debt(ctx: ModelContext, inputs: Sequence[np.ndarray], cfg: FunctionConfig) -> Dict[str, np.ndarray]:
    months = ctx.months
    start = cfg.month("startMonth")
    amount = cfg.scalar("amount")
    rate = cfg.scalar("rate")
    term = cfg.month("term")

    raised = zeros(months)
    repaid = zeros(months)
    idx = np.arange(months)

    if 0 <= start < months:
        raised[start] = amount
    if term > 0:
        outstanding = (idx >= start) & (idx < start + term)
        if 0 <= start + term < months:
            repaid[start + term] = amount
    else:
        outstanding = idx >= start

    bal = np.where(outstanding, amount, 0.0)
    return {
        "int": bal * rate,
        "raised": raised,
        "repaid": repaid,
        "bal": bal,
        "debtMove": raised - repaid,
    }
