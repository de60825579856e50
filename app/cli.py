"""
Command-line entry point: run an FM model file and print its series.

    fm-engine model.fm --months 36 --statements --annual --format csv

Exit codes: 0 success, 1 model / input error (message on stderr), 2 usage error.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from core.config import ModelContext
from core.errors import FMError
from core.object_types import DEFAULT_OBJECT_SCHEMA
from core.schema import load_financial_template, load_object_schema
from engine.pipeline import run_model
from fm.parser import parse_fm
from statements.builder import annual_totals, build_financials_from_engine
from statements.template import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="fm-engine",
        description="Run an FM financial model and export its monthly series or statements.",
    )
    p.add_argument("model", help="Path to the FM model file ('-' reads stdin).")
    p.add_argument("--months", type=int, default=24, help="Projection horizon in months (default: 24).")
    p.add_argument("--years", type=int, default=None, help="Years for annual inputs (default: ceil(months / 12)).")
    p.add_argument("--schema", default=None, help="Object-type schema JSON (default: built-in schema).")
    p.add_argument("--template", default=None, help="Financial template JSON (default: built-in template).")
    p.add_argument(
        "--overrides",
        default=None,
        help='Overrides JSON: {"alias": {"channel": {"month": value}}}.',
    )
    p.add_argument(
        "--format",
        dest="fmt",
        default="text",
        choices=["text", "csv", "json"],
        help="Output format (default: text).",
    )
    p.add_argument("--statements", action="store_true", help="Output financial statements instead of the store.")
    p.add_argument("--annual", action="store_true", help="Sum statements per year (requires --statements).")
    p.add_argument("--out", default=None, help="Write to this file instead of stdout.")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    ns = p.parse_args(argv)
    if ns.annual and not ns.statements:
        p.error("--annual requires --statements")
    if ns.months < 1:
        p.error("--months must be >= 1")
    return ns


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _render(frame: pd.DataFrame, fmt: str) -> str:
    frame = frame.rename(columns=lambda c: c.strftime("%Y-%m") if isinstance(c, pd.Timestamp) else c)
    if fmt == "csv":
        return frame.to_csv()
    if fmt == "json":
        return json.dumps(json.loads(frame.to_json(orient="index")), indent=2) + "\n"
    return frame.to_string() + "\n"


def main(argv: Optional[List[str]] = None) -> int:
    ns = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if ns.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        source = _read_source(ns.model)
        schema = load_object_schema(ns.schema) if ns.schema else DEFAULT_OBJECT_SCHEMA
        template = load_financial_template(ns.template) if ns.template else DEFAULT_TEMPLATE
        overrides = json.loads(Path(ns.overrides).read_text(encoding="utf-8")) if ns.overrides else None

        context = ModelContext.from_metadata(parse_fm(source).metadata, months=ns.months, years=ns.years)
        result = run_model(source, schema, context, overrides=overrides)

        if ns.statements:
            financials = build_financials_from_engine(result.engine, result.index, schema, context, template)
            if ns.annual:
                financials = annual_totals(financials)
            frame = financials.to_frame(context.start_date, labels=True)
        else:
            frame = result.to_frame()
    except (FMError, ValueError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    text = _render(frame, ns.fmt)
    if ns.out:
        Path(ns.out).write_text(text, encoding="utf-8")
        logger.info("Wrote %s", ns.out)
    else:
        sys.stdout.write(text)
    return 0


__all__ = ["main"]


if __name__ == "__main__":
    sys.exit(main())
