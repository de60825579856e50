"""
Default financial template — P&L, cash flow, balance sheet and memo items.

Leaf items receive model channel outputs (see channel ``destinations`` in the
object schema). Parents with ``children`` sum their children by sign; items
with a ``formula`` are computed from other items. Balance-sheet leaves are
``cumulative``: they receive movements and report the running balance.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.schema import FinancialTemplate, load_financial_template


def _item(
    code: str,
    label: str,
    level: int,
    sign: int = 1,
    *,
    formula: Optional[str] = None,
    children: Optional[List[str]] = None,
    cumulative: bool = False,
) -> Dict[str, Any]:
    item: Dict[str, Any] = {"code": code, "label": label, "level": level, "sign": sign}
    if formula:
        item["formula"] = formula
    if children:
        item["children"] = children
        item["collapsible"] = True
    if cumulative:
        item["cumulative"] = True
    return item


# ========= Profit & Loss =========

PNL_ITEMS = [
    _item("pnl.revenue", "Revenue", 1, children=["pnl.revenue.new", "pnl.revenue.recur"]),
    _item("pnl.revenue.new", "New Revenue", 2),
    _item("pnl.revenue.recur", "Recurring Revenue", 2),
    _item("pnl.revenue.total", "Total Revenue", 1, formula="sum(pnl.revenue.*)"),
    _item("pnl.cogs", "Cost of Goods Sold", 1, -1, children=["pnl.cogs.direct"]),
    _item("pnl.cogs.direct", "Direct Costs", 2),
    _item("pnl.cogs.total", "Total COGS", 1, formula="sum(pnl.cogs.*)"),
    _item("pnl.grossProfit", "Gross Profit", 0, formula="pnl.revenue.total - pnl.cogs.total"),
    _item("pnl.opex", "Operating Expenses", 1, -1, children=["pnl.opex.sm", "pnl.opex.ga", "pnl.opex.rd"]),
    _item("pnl.opex.sm", "Sales & Marketing", 2),
    _item("pnl.opex.ga", "General & Administrative", 2),
    _item("pnl.opex.rd", "Research & Development", 2),
    _item("pnl.opex.total", "Total Operating Expenses", 1, formula="sum(pnl.opex.*)"),
    _item("pnl.ebitda", "EBITDA", 0, formula="pnl.grossProfit - pnl.opex.total"),
    _item("pnl.da", "Depreciation & Amortization", 1, -1),
    _item("pnl.ebit", "EBIT", 0, formula="pnl.ebitda - pnl.da"),
    _item("pnl.otherIncome", "Other Income", 1),
    _item("pnl.otherExpenses", "Other Expenses", 1, -1),
    _item("pnl.interest", "Interest Expense", 1, -1),
    _item("pnl.tax", "Tax", 1, -1),
    _item(
        "pnl.netIncome",
        "Net Income",
        0,
        formula="pnl.ebit + pnl.otherIncome - pnl.otherExpenses - pnl.interest - pnl.tax",
    ),
]

# ========= Cash Flow =========

CASH_ITEMS = [
    _item("cash.ops", "Operating Activities", 1, children=["cash.ops.in", "cash.ops.out"]),
    _item("cash.ops.in", "Cash In", 2, children=["cash.ops.in.sales", "cash.ops.in.other"]),
    _item("cash.ops.in.sales", "Sales Collections", 3),
    _item("cash.ops.in.other", "Other Operating Cash In", 3),
    _item("cash.ops.in.total", "Total Cash In", 2, formula="sum(cash.ops.in.*)"),
    _item("cash.ops.out", "Cash Out", 2, -1, children=["cash.ops.out.cogs", "cash.ops.out.opex", "cash.ops.out.other"]),
    _item("cash.ops.out.cogs", "COGS Payments", 3),
    _item("cash.ops.out.opex", "Operating Expense Payments", 3),
    _item("cash.ops.out.other", "Other Operating Cash Out", 3),
    _item("cash.ops.out.total", "Total Cash Out", 2, formula="sum(cash.ops.out.*)"),
    _item("cash.ops.total", "Net Operating Cash Flow", 1, formula="cash.ops.in.total - cash.ops.out.total"),
    _item("cash.invest", "Investing Activities", 1, children=["cash.invest.in", "cash.invest.out"]),
    _item("cash.invest.in", "Investment Cash In", 2, children=["cash.invest.in.assetSale"]),
    _item("cash.invest.in.assetSale", "Asset Sales", 3),
    _item("cash.invest.in.total", "Total Investment Cash In", 2, formula="sum(cash.invest.in.*)"),
    _item("cash.invest.out", "Investment Cash Out", 2, -1, children=["cash.invest.out.capex"]),
    _item("cash.invest.out.capex", "Capital Expenditure", 3),
    _item("cash.invest.out.total", "Total Investment Cash Out", 2, formula="sum(cash.invest.out.*)"),
    _item("cash.invest.total", "Net Investing Cash Flow", 1, formula="cash.invest.in.total - cash.invest.out.total"),
    _item("cash.finance", "Financing Activities", 1, children=["cash.finance.in", "cash.finance.out"]),
    _item("cash.finance.in", "Financing Cash In", 2, children=["cash.finance.in.equity", "cash.finance.in.debt"]),
    _item("cash.finance.in.equity", "Equity Raised", 3),
    _item("cash.finance.in.debt", "Debt Raised", 3),
    _item("cash.finance.in.total", "Total Financing Cash In", 2, formula="sum(cash.finance.in.*)"),
    _item(
        "cash.finance.out",
        "Financing Cash Out",
        2,
        -1,
        children=["cash.finance.out.dividends", "cash.finance.out.debtRepay"],
    ),
    _item("cash.finance.out.dividends", "Dividends Paid", 3),
    _item("cash.finance.out.debtRepay", "Debt Repayment", 3),
    _item("cash.finance.out.total", "Total Financing Cash Out", 2, formula="sum(cash.finance.out.*)"),
    _item("cash.finance.total", "Net Financing Cash Flow", 1, formula="cash.finance.in.total - cash.finance.out.total"),
    _item("cash.netChange", "Net Change in Cash", 0, formula="cash.ops.total + cash.invest.total + cash.finance.total"),
    _item("cash.balance", "Cash Balance", 0, formula="cash.netChange", cumulative=True),
]

# ========= Balance Sheet =========

_CURRENT_ASSETS = [
    "balance.assets.current.cash",
    "balance.assets.current.ar",
    "balance.assets.current.inventory",
    "balance.assets.current.other",
]

BALANCE_ITEMS = [
    _item("balance.assets", "Assets", 0, children=["balance.assets.current", "balance.assets.fixed"]),
    _item("balance.assets.current", "Current Assets", 1, children=_CURRENT_ASSETS),
    _item("balance.assets.current.cash", "Cash", 2, formula="cash.balance"),
    _item("balance.assets.current.ar", "Accounts Receivable", 2, cumulative=True),
    _item("balance.assets.current.inventory", "Inventory", 2, cumulative=True),
    _item("balance.assets.current.other", "Other Current Assets", 2, cumulative=True),
    _item("balance.assets.current.total", "Total Current Assets", 1, formula=" + ".join(_CURRENT_ASSETS)),
    _item("balance.assets.fixed", "Fixed Assets", 1, children=["balance.assets.fixed.ppe", "balance.assets.fixed.intangible"]),
    _item("balance.assets.fixed.ppe", "Property, Plant & Equipment", 2, cumulative=True),
    _item("balance.assets.fixed.intangible", "Intangible Assets", 2, cumulative=True),
    _item("balance.assets.fixed.total", "Total Fixed Assets", 1, formula="sum(balance.assets.fixed.*)"),
    _item(
        "balance.assets.total",
        "Total Assets",
        0,
        formula="balance.assets.current.total + balance.assets.fixed.total",
    ),
    _item(
        "balance.liabilities",
        "Liabilities",
        0,
        children=["balance.liabilities.current", "balance.liabilities.longTerm"],
    ),
    _item(
        "balance.liabilities.current",
        "Current Liabilities",
        1,
        children=[
            "balance.liabilities.current.ap",
            "balance.liabilities.current.accrued",
            "balance.liabilities.current.debtShort",
        ],
    ),
    _item("balance.liabilities.current.ap", "Accounts Payable", 2, cumulative=True),
    _item("balance.liabilities.current.accrued", "Accrued Expenses", 2, cumulative=True),
    _item("balance.liabilities.current.debtShort", "Short-term Debt", 2, cumulative=True),
    _item(
        "balance.liabilities.current.total",
        "Total Current Liabilities",
        1,
        formula="sum(balance.liabilities.current.*)",
    ),
    _item("balance.liabilities.longTerm", "Long-term Liabilities", 1, children=["balance.liabilities.longTerm.debt"]),
    _item("balance.liabilities.longTerm.debt", "Long-term Debt", 2, cumulative=True),
    _item(
        "balance.liabilities.longTerm.total",
        "Total Long-term Liabilities",
        1,
        formula="sum(balance.liabilities.longTerm.*)",
    ),
    _item(
        "balance.liabilities.total",
        "Total Liabilities",
        0,
        formula="balance.liabilities.current.total + balance.liabilities.longTerm.total",
    ),
    _item("balance.equity", "Equity", 0, children=["balance.equity.share", "balance.equity.retained"]),
    _item("balance.equity.share", "Share Capital", 1, cumulative=True),
    _item("balance.equity.retained", "Retained Earnings", 1, formula="cumsum(pnl.netIncome)"),
    _item("balance.equity.total", "Total Equity", 0, formula="balance.equity.share + balance.equity.retained"),
    _item("balance.total", "Total Liabilities & Equity", 0, formula="balance.liabilities.total + balance.equity.total"),
    _item("balance.check", "Balance Check", 0, formula="balance.assets.total - balance.total"),
]

# ========= Memo =========

MEMO_ITEMS = [
    _item(
        "memo.payroll",
        "Payroll Costs",
        0,
        children=["memo.payroll.cogs", "memo.payroll.sm", "memo.payroll.ga", "memo.payroll.rd"],
    ),
    _item("memo.payroll.cogs", "COGS Team Payroll", 1),
    _item("memo.payroll.sm", "Sales & Marketing Team Payroll", 1),
    _item("memo.payroll.ga", "G&A Team Payroll", 1),
    _item("memo.payroll.rd", "R&D Team Payroll", 1),
    _item("memo.payroll.total", "Total Payroll", 0, formula="sum(memo.payroll.*)"),
    _item(
        "memo.headcount",
        "Headcount",
        0,
        children=["memo.headcount.cogs", "memo.headcount.sm", "memo.headcount.ga", "memo.headcount.rd"],
    ),
    _item("memo.headcount.cogs", "COGS Team Headcount", 1),
    _item("memo.headcount.sm", "Sales & Marketing Team Headcount", 1),
    _item("memo.headcount.ga", "G&A Team Headcount", 1),
    _item("memo.headcount.rd", "R&D Team Headcount", 1),
    _item("memo.headcount.total", "Total Headcount", 0, formula="sum(memo.headcount.*)"),
]


RAW_TEMPLATE: Dict[str, Any] = {
    "name": "Standard",
    "statements": {
        "pnl": {"code": "pnl", "name": "Profit & Loss", "description": "Revenue and expenses", "lineItems": PNL_ITEMS},
        "cash": {"code": "cash", "name": "Cash Flow", "description": "Cash movements", "lineItems": CASH_ITEMS},
        "balance": {
            "code": "balance",
            "name": "Balance Sheet",
            "description": "Assets, liabilities, and equity",
            "lineItems": BALANCE_ITEMS,
        },
        "memo": {
            "code": "memo",
            "name": "Memo Items",
            "description": "Items tracked for reporting but not shown in main statements",
            "lineItems": MEMO_ITEMS,
        },
    },
}

DEFAULT_TEMPLATE: FinancialTemplate = load_financial_template(RAW_TEMPLATE)
