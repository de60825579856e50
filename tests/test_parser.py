import pytest

from core.errors import FMSyntaxError
from fm.ast import LiteralArg, RefArg, SpreadArg
from fm.parser import parse_arg, parse_fm, split_top_level


MODEL = """FM
// BusinessName: Numberly
// DateTime: 2025-10-30

Acquisition:
    // Annual new clients by source
    NewClients = Quant() => upworkNew, gadsNew   // by channel
    Retained   = SubRetain(upworkNew.val, gadsNew.val) => upworkClients, gadsClients

Revenue:
    Fees = RevMul(...Retained.act) => upworkFees(factor: 250), gadsFees(factor: 12.5%)
"""


def test_sections_objects_and_metadata():
    ast = parse_fm(MODEL)
    assert ast.metadata == {"BusinessName": "Numberly", "DateTime": "2025-10-30"}
    assert [s.name for s in ast.sections] == ["Acquisition", "Revenue"]
    assert [o.name for o in ast.objects] == ["NewClients", "Retained", "Fees"]
    assert [o.name for o in ast.sections[0].objects] == ["NewClients", "Retained"]

    new = ast.objects[0]
    assert new.fn_name == "Quant"
    assert new.args == ()
    assert new.outputs == ("upworkNew", "gadsNew")
    assert new.section == "Acquisition"
    assert new.line == 7
    assert new.comment == "Annual new clients by source\nby channel"


def test_arguments_classified():
    ast = parse_fm(MODEL)
    retained, fees = ast.objects[1], ast.objects[2]
    assert retained.args[0] == RefArg(name="upworkNew", field="val", raw="upworkNew.val")
    assert fees.args == (SpreadArg(object="Retained", field="act", raw="...Retained.act"),)


def test_inline_output_assumptions():
    fees = parse_fm(MODEL).objects[2]
    assert fees.outputs == ("upworkFees", "gadsFees")
    assert fees.output_assumptions == {"upworkFees": {"factor": 250.0}, "gadsFees": {"factor": 0.125}}


def test_numeric_literal_before_reference():
    assert parse_arg("1.5") == LiteralArg(value=1.5, raw="1.5")
    assert parse_arg("-3") == LiteralArg(value=-3.0, raw="-3")
    assert parse_arg("monthly") == LiteralArg(value="monthly", raw="monthly")
    assert parse_arg("a.b").kind == "ref"


def test_split_respects_parentheses():
    assert split_top_level("a(x: 1, y: 2), b") == ["a(x: 1, y: 2)", "b"]
    assert split_top_level("") == []


def test_single_arrow_separator():
    ast = parse_fm("S:\n  A = Quant() > x, y\n")
    assert ast.objects[0].outputs == ("x", "y")


def test_multiline_object_and_continuation_comments():
    src = "S:\n  A = Sum(x.val,   // first\n        y.val) => total  // last\n"
    node = parse_fm(src).objects[0]
    assert [a.raw for a in node.args] == ["x.val", "y.val"]
    assert node.outputs == ("total",)
    assert node.comment == "first\nlast"
    assert node.line == 2


def test_blank_line_drops_orphan_comment():
    src = "S:\n// orphan\n\nA = Quant()\n"
    assert parse_fm(src).objects[0].comment == ""


def test_object_before_section():
    with pytest.raises(FMSyntaxError) as ei:
        parse_fm("A = Quant()\n")
    assert ei.value.line == 1
    assert "before any section" in str(ei.value)


def test_stray_line_without_object():
    with pytest.raises(FMSyntaxError) as ei:
        parse_fm("S:\nthis is not fm\n")
    assert ei.value.line == 2
    assert ei.value.text == "this is not fm"


def test_malformed_object():
    with pytest.raises(FMSyntaxError):
        parse_fm("S:\n  A = Quant\n")


def test_malformed_spread():
    with pytest.raises(FMSyntaxError) as ei:
        parse_fm("S:\n  A = Sum(...Broken) => a\n")
    assert "spread" in str(ei.value).lower()


def test_metadata_only_at_top():
    ast = parse_fm("S:\n// Owner: me\nA = Quant()\n")
    assert ast.metadata == {}
    assert ast.objects[0].comment == "Owner: me"
