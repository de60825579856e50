import logging

import numpy as np
import pytest

from core.schema import load_financial_template, load_object_schema
from statements import ModelOutput, annual_totals, build_financials

MONTHS = 3


def _out(object_type, alias, channel, *values):
    return ModelOutput(
        object_type=object_type,
        object_name=alias.capitalize(),
        alias=alias,
        channel=channel,
        values=np.array(values, dtype=float),
    )


def test_outputs_land_on_destinations(schema):
    fin = build_financials([_out("RevMul", "upworkFees", "rev", 100, 100, 100)], MONTHS, schema)
    assert fin["pnl.revenue.recur"].tolist() == [100, 100, 100]
    assert fin["cash.ops.in.sales"].tolist() == [100, 100, 100]
    assert fin["pnl.revenue"].tolist() == [100, 100, 100]
    contributors = fin.contributors["pnl.revenue.recur"]
    assert [c.label for c in contributors] == ["Upwork Fees - Revenue"]
    assert contributors[0].alias == "upworkFees"


def test_wildcard_sums_only_leaf_children(schema):
    outputs = [
        _out("RevMul", "fees", "rev", 100, 100, 100),
        _out("RevMulNew", "launch", "rev", 50, 0, 0),
    ]
    fin = build_financials(outputs, MONTHS, schema)
    assert fin["pnl.revenue.total"].tolist() == [150, 100, 100]


def test_profit_and_loss_chain(schema):
    outputs = [
        _out("RevMul", "fees", "rev", 100, 100, 100),
        _out("CostDC", "hosting", "cost", 10, 10, 10),
        _out("CostSM", "ads", "cost", 20, 20, 20),
        _out("FundDebt", "loan", "int", 0, 5, 5),
    ]
    fin = build_financials(outputs, MONTHS, schema)
    assert fin["pnl.grossProfit"].tolist() == [90, 90, 90]
    assert fin["pnl.ebitda"].tolist() == [70, 70, 70]
    assert fin["pnl.netIncome"].tolist() == [70, 65, 65]
    assert fin["cash.ops.total"].tolist() == [70, 65, 65]


def test_balance_leaves_accumulate_movements(schema):
    outputs = [
        _out("RevMulDel", "invoiced", "rev", 100, 100, 100),
        _out("FundDebt", "loan", "debtMove", 500, 0, -500),
        _out("FundDebt", "loan", "raised", 500, 0, 0),
        _out("FundDebt", "loan", "repaid", 0, 0, 500),
    ]
    fin = build_financials(outputs, MONTHS, schema)
    assert fin["balance.assets.current.ar"].tolist() == [100, 200, 300]
    assert fin["balance.liabilities.longTerm.debt"].tolist() == [500, 500, 0]
    assert fin["balance.assets.current.cash"].tolist() == [500, 500, 0]
    assert fin["balance.equity.retained"].tolist() == [100, 200, 300]
    assert not fin["balance.check"].any()


def test_memo_items(schema):
    outputs = [
        _out("StaffDiv", "support", "heads", 2, 2, 3),
        _out("StaffDiv", "support", "cost", 200, 200, 300),
    ]
    fin = build_financials(outputs, MONTHS, schema)
    assert fin["memo.headcount.total"].tolist() == [2, 2, 3]
    assert fin["memo.payroll.total"].tolist() == [200, 200, 300]
    assert fin["pnl.cogs.total"].tolist() == [200, 200, 300]


def test_outputs_without_destinations_are_ignored(schema):
    fin = build_financials([_out("Quant", "leads", "val", 9, 9, 9)], MONTHS, schema)
    assert fin.contributors == {}
    assert not fin["pnl.revenue.total"].any()


def test_unknown_destination_is_skipped(caplog):
    schema = load_object_schema({"Odd": {"channels": {"val": {"destinations": ["pnl.nowhere", "pnl.otherIncome"]}}}})
    with caplog.at_level(logging.WARNING):
        fin = build_financials([_out("Odd", "odd", "val", 1, 2, 3)], MONTHS, schema)
    assert "pnl.nowhere" in caplog.text
    assert fin["pnl.otherIncome"].tolist() == [1, 2, 3]
    assert "pnl.nowhere" not in fin.line_items


def _tiny_template(formula):
    return load_financial_template(
        {
            "name": "Tiny",
            "statements": {
                "x": {
                    "code": "x",
                    "name": "Tiny",
                    "lineItems": [
                        {"code": "x.net", "children": ["x.net.a", "x.net.b"]},
                        {"code": "x.net.a"},
                        {"code": "x.net.b", "sign": -1},
                        {"code": "x.calc", "formula": formula},
                    ],
                }
            },
        }
    )


def test_children_sum_by_sign():
    schema = load_object_schema(
        {"A": {"channels": {"val": {"destinations": ["x.net.a"]}}}, "B": {"channels": {"val": {"destinations": ["x.net.b"]}}}}
    )
    outputs = [_out("A", "a", "val", 10, 10, 10), _out("B", "b", "val", 3, 4, 5)]
    fin = build_financials(outputs, MONTHS, schema, _tiny_template("cumsum(x.net)"))
    assert fin["x.net"].tolist() == [7, 6, 5]
    assert fin["x.calc"].tolist() == [7, 13, 18]


def test_unknown_formula_code_is_zero(caplog):
    with caplog.at_level(logging.WARNING):
        fin = build_financials([], MONTHS, {}, _tiny_template("x.net.a + x.missing"))
    assert fin["x.calc"].tolist() == [0, 0, 0]
    assert "x.missing" in caplog.text


def test_annual_totals_with_partial_year(schema):
    fin = build_financials([_out("RevMul", "fees", "rev", *([1.0] * 14))], 14, schema)
    annual = annual_totals(fin)
    assert annual.frequency == "annual"
    assert annual.periods == 2
    assert annual["pnl.revenue.total"].tolist() == [12, 2]

    frame = annual.to_frame(labels=True)
    assert list(frame.columns) == ["label", "Y1", "Y2"]
    assert frame.loc["pnl.revenue.total", "label"] == "Total Revenue"


def test_statement_codes(schema):
    fin = build_financials([], MONTHS, schema)
    codes = fin.statement_codes("balance")
    assert codes[0] == "balance.assets"
    assert codes[-1] == "balance.check"
    with pytest.raises(KeyError):
        fin.statement_codes("nope")


def test_wildcard_skips_parents_and_grandchildren():
    template = load_financial_template(
        {
            "name": "Nested",
            "statements": {
                "pnl": {
                    "code": "pnl",
                    "name": "P&L",
                    "lineItems": [
                        {"code": "pnl.revenue", "children": ["pnl.revenue.a", "pnl.revenue.grp"]},
                        {"code": "pnl.revenue.a"},
                        {"code": "pnl.revenue.grp", "children": ["pnl.revenue.grp.x"]},
                        {"code": "pnl.revenue.grp.x"},
                        {"code": "pnl.revenue.total", "formula": "sum(pnl.revenue.*)"},
                    ],
                }
            },
        }
    )
    schema = load_object_schema(
        {
            "A": {"channels": {"val": {"destinations": ["pnl.revenue.a"]}}},
            "X": {"channels": {"val": {"destinations": ["pnl.revenue.grp.x"]}}},
        }
    )
    outputs = [_out("A", "a", "val", 1, 1, 1), _out("X", "x", "val", 5, 5, 5)]
    fin = build_financials(outputs, MONTHS, schema, template)
    assert fin["pnl.revenue.total"].tolist() == [1, 1, 1]
    assert fin["pnl.revenue.grp"].tolist() == [5, 5, 5]
    assert fin["pnl.revenue"].tolist() == [6, 6, 6]
