import logging

import numpy as np
import pytest

from core.errors import CycleError, EngineError
from engine import build_output_graph, run_model
from engine.runner import apply_overrides, gather_inputs
from fm import parse_and_link
from functions import with_functions


def _graph(src):
    ast, index = parse_and_link(src)
    return build_output_graph(ast, index)


# --- graph ---


def test_order_respects_forward_references():
    graph = _graph("S:\n  C = Sum(b.val) => c\n  B = Quant() => b\n")
    assert graph.order == ["b", "c"]
    assert graph.deps == {"c": ["b"], "b": []}
    assert graph.dependents == {"c": [], "b": ["c"]}
    assert graph.owner("c") == "C"


def test_order_is_stable_for_independent_outputs():
    graph = _graph("S:\n  Z = Quant() => z\n  A = Quant() => a\n  M = Quant() => m\n")
    assert graph.order == ["z", "a", "m"]


def test_object_reference_depends_on_every_alias():
    graph = _graph("S:\n  P = Quant() => p, q\n  T = Sum(P.val) => t\n")
    assert graph.deps["t"] == ["p", "q"]


def test_sibling_output_feed_is_not_a_cycle():
    graph = _graph("S:\n  P = Quant() => p\n  S = Sum(p.val, x.val) => x, y\n")
    assert graph.order == ["p", "x", "y"]


def test_cycle_reports_path():
    with pytest.raises(CycleError) as ei:
        _graph("S:\n  A = Sum(B.val)\n  B = Sum(A.val)\n")
    assert ei.value.cycle == ["A", "B", "A"]
    assert str(ei.value) == "Dependency cycle detected at output level: A -> B -> A"


def test_self_reference_is_a_cycle():
    with pytest.raises(CycleError) as ei:
        _graph("S:\n  A = Sum(A.val)\n")
    assert ei.value.cycle == ["A", "A"]


# --- engine ---

BASE = "S:\n  Base = Src() => a, b\n  Tot = Add(...Base.val) => t\n"


def test_store_keys_and_rollups(small_schema, ctx6):
    result = run_model(BASE, small_schema, ctx6)
    store = result.store
    assert store["a.val"].tolist() == [5.0] * 6
    assert store["t.val"].tolist() == [10.0] * 6
    assert store["Base.val"].tolist() == [10.0] * 6
    assert store["Tot.val"].tolist() == [10.0] * 6
    assert result.engine.channels_by_alias == {"a": ["val"], "b": ["val"], "t": ["val"]}
    assert result.order == ["a", "b", "t"]


def test_object_level_reference_sums_aliases(small_schema, ctx6):
    result = run_model("S:\n  Base = Src() => a, b\n  Tot = Add(Base.val) => t\n", small_schema, ctx6)
    assert result.store["t.val"].tolist() == [10.0] * 6


def test_synthetic_alias_keeps_its_own_series(small_schema, ctx6):
    result = run_model("S:\n  A = Src()\n", small_schema, ctx6)
    assert result.store["A.val"].tolist() == [5.0] * 6


def test_literal_arguments(small_schema, ctx6):
    result = run_model("S:\n  M = Mul(3) => m\n  Z = Add(monthly) => z\n", small_schema, ctx6)
    assert result.store["m.val"].tolist() == [6.0] * 6
    assert result.store["z.val"].tolist() == [0.0] * 6


def test_named_channels(small_schema, ctx6):
    result = run_model("S:\n  Base = Src() => a\n  R = Retain(a.val) => r\n", small_schema, ctx6)
    assert set(result.engine.channels_by_alias["r"]) == {"act", "chu"}
    assert result.store["r.act"][:2].tolist() == [5.0, 9.5]
    assert result.store["R.chu"][1] == pytest.approx(0.5)


def test_unnamed_series_for_multi_channel_type(small_schema, ctx6):
    with pytest.raises(EngineError, match="declares multiple channels"):
        run_model("S:\n  X = Split() => x\n", small_schema, ctx6)


@pytest.mark.parametrize("src", ["S:\n  X = Bare() => x\n", "S:\n  X = Unknown() => x\n"])
def test_type_without_channels(small_schema, ctx6, src):
    with pytest.raises(EngineError, match="has no channels"):
        run_model(src, small_schema, ctx6)


def test_unknown_implementation(small_schema, ctx6):
    with pytest.raises(EngineError, match='Unknown function "NoSuchFunction"') as ei:
        run_model("S:\n  X = Ghost() => x\n", small_schema, ctx6)
    assert ei.value.alias == "x"


def test_function_must_return_mapping(small_schema, ctx6):
    registry = with_functions({"Sum": lambda ctx, inputs, cfg: [1, 2, 3]})
    with pytest.raises(EngineError, match="must return a mapping"):
        run_model("S:\n  X = Add() => x\n", small_schema, ctx6, registry=registry)


def test_function_series_length_checked(small_schema, ctx6):
    registry = with_functions({"Sum": lambda ctx, inputs, cfg: {"val": np.ones(3)}})
    with pytest.raises(EngineError, match="series of 6 months"):
        run_model("S:\n  X = Add() => x\n", small_schema, ctx6, registry=registry)


def test_missing_input_message(ctx6):
    ast, index = parse_and_link("S:\n  Base = Quant() => a\n  Tot = Sum(a.val) => t\n")
    node = ast.find("Tot")
    with pytest.raises(EngineError) as ei:
        gather_inputs(node, "t", [0], index, {"x.val": np.zeros(6)}, 6)
    assert str(ei.value) == 'Missing input "a.val" for Tot.t (arg #0). Store currently has: x.val'


def test_overrides_feed_downstream(small_schema, ctx6, caplog):
    overrides = {"a": {"val": {0: 100, "2": 50, 99: 1, "soon": 3}}}
    with caplog.at_level(logging.WARNING):
        result = run_model(BASE, small_schema, ctx6, overrides=overrides)
    assert result.store["a.val"].tolist() == [100, 5, 50, 5, 5, 5]
    assert result.store["t.val"].tolist() == [105, 10, 55, 10, 10, 10]
    assert "99" in caplog.text
    assert "soon" in caplog.text


def test_overrides_work_on_a_copy():
    series = np.zeros(3)
    series.flags.writeable = False
    out = apply_overrides(series, "a", "val", {"a": {"val": {1: 4}}})
    assert out.tolist() == [0, 4, 0]
    assert series.tolist() == [0, 0, 0]
    assert apply_overrides(series, "b", "val", {"a": {"val": {1: 4}}}) is series


def test_custom_assumptions_are_not_mutated(small_schema, ctx6):
    first = run_model(BASE, small_schema, ctx6)
    again = run_model(BASE, small_schema, ctx6, assumptions=first.assumptions)
    assert again.assumptions is first.assumptions
    assert np.array_equal(again.store["t.val"], first.store["t.val"])


def test_to_frame(small_schema, ctx6):
    frame = run_model(BASE, small_schema, ctx6).to_frame()
    assert frame.index.name == "key"
    assert list(frame.columns) == ["M1", "M2", "M3", "M4", "M5", "M6"]
    assert frame.loc["t.val", "M3"] == 10.0


def test_null_override_entries_are_ignored(small_schema, ctx6):
    result = run_model(BASE, small_schema, ctx6, overrides={"a": None, "b": {"val": None}})
    assert result.store["t.val"].tolist() == [10.0] * 6
