"""
Assumptions — raw user inputs materialized into monthly series.
"""

from .materialize import RawAssumption, materialize
from .model import (
    AssumptionField,
    ModelAssumptions,
    ObjectAssumptions,
    build_model_assumptions,
    recalculate_all,
    unwrap_fields,
    update_assumption,
)

__all__ = [
    "RawAssumption",
    "materialize",
    "AssumptionField",
    "ModelAssumptions",
    "ObjectAssumptions",
    "build_model_assumptions",
    "recalculate_all",
    "unwrap_fields",
    "update_assumption",
]
