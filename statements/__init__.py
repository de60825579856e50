"""
Financial statements — default template and the aggregation engine.
"""

from .template import DEFAULT_TEMPLATE
from .builder import (
    Contributor,
    FinancialData,
    ModelOutput,
    annual_totals,
    build_financials,
    build_financials_from_engine,
    collect_model_outputs,
)

__all__ = [
    "DEFAULT_TEMPLATE",
    "Contributor",
    "FinancialData",
    "ModelOutput",
    "annual_totals",
    "build_financials",
    "build_financials_from_engine",
    "collect_model_outputs",
]
