from pathlib import Path

import numpy as np
import pandas as pd

from assumptions import update_assumption
from core.config import ModelContext
from engine import run_model
from fm import parse_fm
from statements import annual_totals, build_financials_from_engine

SAAS = (Path(__file__).parent / "data" / "saas.fm").read_text(encoding="utf-8")


def _run(schema, months=6, **kwargs):
    context = ModelContext.from_metadata(parse_fm(SAAS).metadata, months=months)
    return run_model(SAAS, schema, context, **kwargs)


def test_context_from_metadata():
    context = ModelContext.from_metadata({"StartDate": "2025-01-15"}, months=18)
    assert context.start_date == pd.Timestamp("2025-01-15")
    assert context.years == 2
    assert ModelContext.from_metadata({"Date": "not a date"}).start_date is None


def test_saas_store(schema):
    store = _run(schema).store
    assert store["seed.val"].tolist() == [1000, 0, 0, 0, 0, 0]
    assert store["Seed.cum"].tolist() == [1000] * 6
    assert store["subs.act"].tolist() == [10, 20, 30, 40, 50, 60]
    assert store["subs.rev"].tolist() == [50, 100, 150, 200, 250, 300]
    assert np.allclose(store["loan.int"], [0, 6, 6, 6, 0, 0])
    assert store["loan.repaid"].tolist() == [0, 0, 0, 0, 600, 0]


def test_saas_statements_balance(schema):
    result = _run(schema)
    fin = build_financials_from_engine(result.engine, result.index, schema, result.context)
    assert np.allclose(fin["pnl.netIncome"], [30, 74, 124, 174, 230, 280])
    assert np.allclose(fin["cash.balance"], [1030, 1704, 1828, 2002, 1632, 1912])
    assert np.allclose(fin["balance.liabilities.longTerm.debt"], [0, 600, 600, 600, 0, 0])
    assert np.allclose(fin["balance.equity.total"], [1030, 1104, 1228, 1402, 1632, 1912])
    assert np.allclose(fin["balance.check"], 0.0)

    frame = fin.to_frame(result.context.start_date)
    assert frame.columns[0] == pd.Timestamp("2025-01-01")


def test_saas_annual(schema):
    result = _run(schema, months=24)
    annual = annual_totals(build_financials_from_engine(result.engine, result.index, schema, result.context))
    assert annual.periods == 2
    assert annual["pnl.opex.ga"].tolist() == [240, 240]


def test_edited_assumptions_change_the_run(schema):
    base = _run(schema)
    edited = update_assumption(base.assumptions, "Subs", "price", base.context, alias="subs", single=10)
    rerun = _run(schema, assumptions=edited)
    assert rerun.store["subs.rev"].tolist() == [100, 200, 300, 400, 500, 600]
    assert base.store["subs.rev"].tolist() == [50, 100, 150, 200, 250, 300]


def test_overrides_flow_into_statements(schema):
    result = _run(schema, overrides={"rent": {"cost": {"0": 0}}})
    fin = build_financials_from_engine(result.engine, result.index, schema, result.context)
    assert fin["pnl.opex.ga"].tolist() == [0, 20, 20, 20, 20, 20]
    assert np.allclose(fin["balance.check"], 0.0)


def test_graph_views(schema):
    result = _run(schema)
    assert result.deps["subs"] == ["leads"]
    assert result.dependents["leads"] == ["subs"]
    assert result.order.index("leads") < result.order.index("subs")
