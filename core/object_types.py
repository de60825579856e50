"""
Default object-type schema shipped with the package.

Each FM type names the registry implementation it runs (`impl`), the channels it
produces (and which statement line items those channels feed), and the
assumption fields the materializer builds for it. Many types share one
implementation and differ only in where their channels land.

Month-valued fields (startMonth, month, delayMonths, term) are 0-based month
indices / month counts.
"""

from __future__ import annotations

import copy
from typing import Any, Dict, List

from .schema import ObjectSchema, load_object_schema

_SERIES = {"single": True, "annual": True, "monthly": True, "growth": True, "smoothing": True}
_SEASONAL_SERIES = {**_SERIES, "seasonal": True, "dateRange": True}
_RATE = {"single": True, "annual": True, "monthly": True, "smoothing": True}
_SCALAR = {"single": True}


def _field(name: str, label: str, default: Any, supports: Dict[str, bool], fmt: str = "decimal") -> Dict[str, Any]:
    return {
        "name": name,
        "label": label,
        "baseType": "number",
        "format": fmt,
        "default": default,
        "supports": dict(supports),
    }


START_MONTH = _field("startMonth", "Start Month", 0, _SCALAR, "integer")


def _variant(base: Dict[str, Any], **destinations: List[str]) -> Dict[str, Any]:
    """Copy of ``base`` with some channels re-pointed at other line items."""
    out = copy.deepcopy(base)
    for channel, dests in destinations.items():
        out["channels"][channel]["destinations"] = list(dests)
    return out


_OPEX_GA = ["pnl.opex.ga", "cash.ops.out.opex"]
_OPEX_SM = ["pnl.opex.sm", "cash.ops.out.opex"]
_OPEX_RD = ["pnl.opex.rd", "cash.ops.out.opex"]
_OTHER_EXP = ["pnl.otherExpenses", "cash.ops.out.opex"]
_DIRECT = ["pnl.cogs.direct", "cash.ops.out.cogs"]


QUANT = {
    "impl": "QuantStart",
    "channels": {"val": {"label": "Value", "destinations": []}},
    "assumptions": {
        "object": [],
        "output": [
            _field("amount", "Monthly Quantity", 10, _SEASONAL_SERIES, "integer"),
            START_MONTH,
        ],
    },
}

QUANT_MUL = {
    "impl": "Multiply",
    "channels": {"val": {"label": "Quantity", "destinations": []}},
    "assumptions": {
        "object": [],
        "output": [_field("factor", "Multiplier", 1, {**_SERIES, "seasonal": True}), START_MONTH],
    },
}

QUANT_DIV = {
    "impl": "Divide",
    "channels": {"val": {"label": "Quantity", "destinations": []}},
    "assumptions": {
        "object": [],
        "output": [_field("factor", "Divisor", 1, _SERIES), START_MONTH],
    },
}

COST = {
    "impl": "QuantStart",
    "channels": {"cost": {"label": "Cost", "format": "currency", "destinations": _OPEX_GA}},
    "assumptions": {
        "object": [],
        "output": [
            _field("amount", "Monthly amount", 100, _SEASONAL_SERIES, "currency"),
            START_MONTH,
        ],
    },
}

COST_MUL = {
    "impl": "Multiply",
    "channels": {"cost": {"label": "Cost", "format": "currency", "destinations": _DIRECT}},
    "assumptions": {
        "object": [],
        "output": [_field("factor", "Unit cost", 1, _SERIES, "currency"), START_MONTH],
    },
}

REV_MUL = {
    "impl": "Multiply",
    "channels": {
        "rev": {"label": "Revenue", "format": "currency", "destinations": ["pnl.revenue.recur", "cash.ops.in.sales"]}
    },
    "assumptions": {
        "object": [],
        "output": [_field("factor", "Price", 1, {**_SERIES, "seasonal": True}, "currency"), START_MONTH],
    },
}

SUB_RETAIN = {
    "impl": "SubRetain",
    "channels": {
        "act": {"label": "Active Users", "destinations": []},
        "chu": {"label": "Churned Users", "destinations": []},
    },
    "assumptions": {
        "object": [],
        "output": [_field("churn", "Monthly churn rate", 0.08, _RATE, "percent"), START_MONTH],
    },
}

SUB_MTH = {
    "impl": "SubMth",
    "channels": {
        "act": {"label": "Active Users", "destinations": []},
        "chu": {"label": "Churned Users", "destinations": []},
        "rev": {"label": "Revenue", "format": "currency", "destinations": ["pnl.revenue.recur", "cash.ops.in.sales"]},
    },
    "assumptions": {
        "object": [],
        "output": [
            _field("price", "Monthly Price", 10, {**_RATE, "dateRange": True}, "currency"),
            _field("churn", "Monthly churn rate", 0.05, _RATE, "percent"),
            START_MONTH,
        ],
    },
}

DEL = {
    "impl": "Delay",
    "channels": {"val": {"label": "Delayed value", "destinations": []}},
    "assumptions": {
        "object": [],
        "output": [_field("delayMonths", "Delay (months)", 1, {"single": True, "monthly": True}, "integer")],
    },
}

ADV = {
    "impl": "Advance",
    "channels": {"val": {"label": "Advanced value", "destinations": []}},
    "assumptions": {
        "object": [],
        "output": [_field("advanceMonths", "Advance (months)", 1, {"single": True, "monthly": True}, "integer")],
    },
}

STAFF_DIV = {
    "impl": "StaffDiv",
    "channels": {
        "heads": {"label": "Headcount", "destinations": ["memo.headcount.cogs"]},
        "cost": {"label": "Salary cost", "format": "currency", "destinations": _DIRECT + ["memo.payroll.cogs"]},
    },
    "assumptions": {
        "object": [],
        "output": [
            _field("productivity", "Activity per head per month", 100, _RATE),
            _field("salary", "Monthly salary", 5000, _SERIES, "currency"),
            START_MONTH,
        ],
    },
}

STAFF_TEAM = {
    "impl": "StaffTeam",
    "channels": {
        "heads": {"label": "Headcount", "destinations": ["memo.headcount.ga"]},
        "cost": {"label": "Salary cost", "format": "currency", "destinations": _OPEX_GA + ["memo.payroll.ga"]},
    },
    "assumptions": {
        "object": [],
        "output": [
            _field("headCount", "Heads", 1, _SERIES, "integer"),
            _field("salary", "Monthly salary", 5000, _SERIES, "currency"),
            START_MONTH,
        ],
    },
}

STAFF_ROLE = {
    "impl": "StaffRole",
    "channels": {
        "cost": {"label": "Salary cost", "format": "currency", "destinations": _OPEX_GA + ["memo.payroll.ga"]},
        "heads": {"label": "Headcount", "destinations": ["memo.headcount.ga"]},
    },
    "assumptions": {
        "object": [],
        "output": [_field("salary", "Monthly salary", 8000, _SERIES, "currency"), START_MONTH],
    },
}

FUND_EQUITY = {
    "impl": "QuantPulse",
    "channels": {
        "val": {"label": "Amount", "format": "currency", "destinations": ["cash.finance.in.equity", "balance.equity.share"]},
        "cum": {"label": "Cumulative Amount", "format": "currency", "destinations": []},
    },
    "assumptions": {
        "object": [],
        "output": [
            _field("amount", "Amount", 100000, _SCALAR, "currency"),
            _field("month", "Month", 0, _SCALAR, "integer"),
        ],
    },
}

FUND_DEBT = {
    "impl": "FundDebt",
    "channels": {
        "int": {"label": "Interest Expense", "format": "currency", "destinations": ["pnl.interest", "cash.ops.out.other"]},
        "raised": {"label": "Debt Raised", "format": "currency", "destinations": ["cash.finance.in.debt"]},
        "repaid": {"label": "Debt Repaid", "format": "currency", "destinations": ["cash.finance.out.debtRepay"]},
        "bal": {"label": "Debt Balance", "format": "currency", "destinations": []},
        "debtMove": {"label": "Net Debt Movement", "format": "currency", "destinations": ["balance.liabilities.longTerm.debt"]},
    },
    "assumptions": {
        "object": [],
        "output": [
            START_MONTH,
            _field("amount", "Amount Borrowed", 0, _SCALAR, "currency"),
            _field("rate", "Interest Rate (Monthly)", 0.01, _SCALAR, "percent"),
            _field("term", "Term (Months)", 12, _SCALAR, "integer"),
        ],
    },
}

SUM = {
    "impl": "Sum",
    "channels": {"val": {"label": "Total", "destinations": []}},
    "assumptions": {"object": [], "output": []},
}

SETUP = {
    "impl": "Setup",
    "channels": {"val": {"label": "Value", "destinations": []}},
    "assumptions": {"object": [], "output": []},
}


RAW_OBJECT_SCHEMA: Dict[str, Dict[str, Any]] = {
    "Quant": QUANT,
    "QuantMul": QUANT_MUL,
    "QuantDiv": QUANT_DIV,
    "Cost": COST,
    "CostDC": _variant(COST, cost=_DIRECT),
    "CostSM": _variant(COST, cost=_OPEX_SM),
    "CostGA": _variant(COST, cost=_OPEX_GA),
    "CostRD": _variant(COST, cost=_OPEX_RD),
    "CostOE": _variant(COST, cost=_OTHER_EXP),
    "CostMul": COST_MUL,
    "CostMulDC": _variant(COST_MUL, cost=_DIRECT),
    "CostMulSM": _variant(COST_MUL, cost=_OPEX_SM),
    "CostMulGA": _variant(COST_MUL, cost=_OPEX_GA),
    "CostMulRD": _variant(COST_MUL, cost=_OPEX_RD),
    "RevMul": REV_MUL,
    "RevMulNew": _variant(REV_MUL, rev=["pnl.revenue.new", "cash.ops.in.sales"]),
    "RevMulDel": _variant(REV_MUL, rev=["pnl.revenue.recur", "balance.assets.current.ar"]),
    "RevMulNewDel": _variant(REV_MUL, rev=["pnl.revenue.new", "balance.assets.current.ar"]),
    "SubRetain": SUB_RETAIN,
    "SubMth": SUB_MTH,
    "Del": DEL,
    "Adv": ADV,
    "StaffDiv": STAFF_DIV,
    "StaffTeam": STAFF_TEAM,
    "StaffRole": STAFF_ROLE,
    "FundEquity": FUND_EQUITY,
    "FundDebt": FUND_DEBT,
    "Sum": SUM,
    "Setup": SETUP,
}

DEFAULT_OBJECT_SCHEMA: ObjectSchema = load_object_schema(RAW_OBJECT_SCHEMA)
