"""
Function registry — implementation name -> model function.

Object types refer to these names through their schema ``impl``; several types
(Cost, Quant, ...) share one implementation and differ only in channel
destinations.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from .base import ModelFunction
from .funding import fund_debt
from .quantity import divide, multiply, quant_pulse, quant_start, setup, sum_inputs
from .staffing import staff_div, staff_role, staff_team
from .subscribers import sub_mth, sub_retain
from .timing import advance, delay

FN_REGISTRY: Dict[str, ModelFunction] = {
    "Multiply": multiply,
    "Divide": divide,
    "QuantStart": quant_start,
    "QuantPulse": quant_pulse,
    "SubRetain": sub_retain,
    "SubMth": sub_mth,
    "Delay": delay,
    "Advance": advance,
    "Sum": sum_inputs,
    "StaffDiv": staff_div,
    "StaffTeam": staff_team,
    "StaffRole": staff_role,
    "FundDebt": fund_debt,
    "Setup": setup,
}


def with_functions(extra: Mapping[str, ModelFunction], base: Optional[Mapping[str, ModelFunction]] = None) -> Dict[str, ModelFunction]:
    """New registry: ``base`` (default FN_REGISTRY) extended / overridden by ``extra``."""
    registry = dict(FN_REGISTRY if base is None else base)
    registry.update(extra)
    return registry
