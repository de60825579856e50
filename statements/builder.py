"""
Financial aggregation — model channel outputs to statement line items.

Steps:
  1. every line item of the template starts at zero
  2. each alias-level channel output is added to every destination its type's
     schema declares, and recorded as a contributor of that line item
  3. statements are evaluated in template order; inside a statement, deeper
     codes first so children are ready before their parents

Formula forms:
  sum(prefix.*)  items exactly one level below prefix with no children and
                 no formula
  sum(code)      copy of code
  cumsum(code)   running total of code
  a + b - c      signed elementwise sum
  code           copy

Missing destinations and unknown codes are logged and treated as zero; the
aggregation never fails a run.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

import numpy as np
import pandas as pd

from core.config import ModelContext
from core.schema import FinancialTemplate, LineItem, ObjectSchema
from core.utils import format_name, period_labels, running_total, zeros
from engine.runner import EngineResult
from fm.indexer import SymbolIndex

from .template import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)

_EXPR_SPLIT = re.compile(r"([+\-])")


@dataclass(frozen=True)
class ModelOutput:
    object_type: str
    object_name: str
    alias: str
    channel: str
    values: np.ndarray


@dataclass(frozen=True)
class Contributor:
    object_type: str
    alias: str
    channel: str
    label: str
    values: np.ndarray


@dataclass(frozen=True)
class FinancialData:
    line_items: Dict[str, np.ndarray]
    contributors: Dict[str, List[Contributor]] = field(default_factory=dict)
    periods: int = 0
    frequency: str = "monthly"
    template: FinancialTemplate = field(default_factory=lambda: DEFAULT_TEMPLATE)

    def __getitem__(self, code: str) -> np.ndarray:
        return self.line_items[code]

    def statement_codes(self, statement: str) -> List[str]:
        return [item.code for item in self.template.statements[statement].line_items]

    def to_frame(self, start_date: Optional[pd.Timestamp] = None, *, labels: bool = False) -> pd.DataFrame:
        """Line items x periods. Monthly columns are dates when ``start_date`` is given."""
        if self.frequency == "annual":
            columns = period_labels(self.periods, prefix="Y")
        else:
            columns = period_labels(self.periods, start_date)
        frame = pd.DataFrame.from_dict(self.line_items, orient="index", columns=columns)
        frame.index.name = "code"
        if labels:
            names = {item.code: item.label or item.code for item in self.template.all_items()}
            frame.insert(0, "label", [names.get(code, code) for code in frame.index])
        return frame


# --- Collection ---


def collect_model_outputs(engine_result: EngineResult, index: SymbolIndex) -> List[ModelOutput]:
    """Alias-level channel series only; object-level roll-ups are not collected."""
    outputs: List[ModelOutput] = []
    for alias, channels in engine_result.channels_by_alias.items():
        node = index.owner_of(alias)
        for channel in channels:
            outputs.append(
                ModelOutput(
                    object_type=node.fn_name,
                    object_name=node.name,
                    alias=alias,
                    channel=channel,
                    values=engine_result.store[f"{alias}.{channel}"],
                )
            )
    return outputs


# --- Formulas ---


class _Evaluator:
    def __init__(self, line_items: Dict[str, np.ndarray], template: FinancialTemplate, months: int) -> None:
        self.line_items = line_items
        self.months = months
        self.items = {item.code: item for item in template.all_items()}

    def get(self, code: str, *, where: str) -> np.ndarray:
        values = self.line_items.get(code)
        if values is None:
            logger.warning("Unknown line item %r referenced by %s; using zeros", code, where)
            return zeros(self.months)
        return values

    def wildcard_sum(self, prefix: str) -> np.ndarray:
        depth = len(prefix.split(".")) + 1
        out = zeros(self.months)
        for code, item in self.items.items():
            if code.startswith(prefix + ".") and item.depth == depth and item.is_leaf:
                out += self.line_items[code]
        return out

    def expression(self, formula: str, where: str) -> np.ndarray:
        out = zeros(self.months)
        sign = 1.0
        for token in (t.strip() for t in _EXPR_SPLIT.split(formula)):
            if not token:
                continue
            if token == "+":
                sign = 1.0
            elif token == "-":
                sign = -1.0
            else:
                out += sign * self.get(token, where=where)
        return out

    def formula(self, item: LineItem) -> np.ndarray:
        f = item.formula.strip()
        if f.startswith("sum(") and f.endswith(")"):
            pattern = f[4:-1].strip()
            if pattern.endswith(".*"):
                return self.wildcard_sum(pattern[:-2])
            return self.get(pattern, where=item.code).copy()
        if f.startswith("cumsum(") and f.endswith(")"):
            return running_total(self.get(f[7:-1].strip(), where=item.code))
        if "+" in f or "-" in f:
            return self.expression(f, item.code)
        return self.get(f, where=item.code).copy()

    def children_sum(self, item: LineItem) -> np.ndarray:
        out = zeros(self.months)
        for child in item.children or ():
            child_item = self.items.get(child)
            sign = child_item.sign if child_item is not None else 1
            out += sign * self.get(child, where=item.code)
        return out

    def evaluate(self, items: Iterable[LineItem]) -> None:
        for item in sorted(items, key=lambda i: -i.depth):
            if not item.formula:
                if item.has_children:
                    self.line_items[item.code] = self.children_sum(item)
                elif item.cumulative:
                    self.line_items[item.code] = running_total(self.line_items[item.code])
                continue
            result = self.formula(item)
            if item.cumulative and not item.formula.strip().startswith("cumsum("):
                result = running_total(result)
            self.line_items[item.code] = result


# --- Build ---


def build_financials(
    outputs: Iterable[ModelOutput],
    months: int,
    schema: ObjectSchema,
    template: FinancialTemplate = DEFAULT_TEMPLATE,
) -> FinancialData:
    """
    Aggregate model outputs into statement line items.

    Parameters
    ----------
    outputs : iterable of ModelOutput
        Alias-level channel series (see ``collect_model_outputs``).
    months : int
        Horizon.
    schema : ObjectSchema
        Provides channel destinations and labels.
    template : FinancialTemplate
        Statements and line items.

    Returns
    -------
    FinancialData
        Monthly line items plus the contributors of each leaf.
    """
    line_items: Dict[str, np.ndarray] = {item.code: zeros(months) for item in template.all_items()}
    contributors: Dict[str, List[Contributor]] = {}

    for output in outputs:
        type_schema = schema.get(output.object_type)
        spec = type_schema.channels.get(output.channel) if type_schema is not None else None
        if spec is None or not spec.destinations:
            logger.debug("No destinations for %s.%s (%s)", output.alias, output.channel, output.object_type)
            continue
        label = f"{format_name(output.alias)} - {spec.label or output.channel}"
        for dest in spec.destinations:
            if dest not in line_items:
                logger.warning(
                    "Destination %r of %s.%s (%s) is not in template %r; skipped",
                    dest,
                    output.alias,
                    output.channel,
                    output.object_type,
                    template.name,
                )
                continue
            line_items[dest] += output.values
            contributors.setdefault(dest, []).append(
                Contributor(
                    object_type=output.object_type,
                    alias=output.alias,
                    channel=output.channel,
                    label=label,
                    values=output.values,
                )
            )

    evaluator = _Evaluator(line_items, template, months)
    for statement in template.statements.values():
        evaluator.evaluate(statement.line_items)

    return FinancialData(
        line_items=line_items,
        contributors=contributors,
        periods=months,
        frequency="monthly",
        template=template,
    )


def build_financials_from_engine(
    engine_result: EngineResult,
    index: SymbolIndex,
    schema: ObjectSchema,
    context: ModelContext,
    template: FinancialTemplate = DEFAULT_TEMPLATE,
) -> FinancialData:
    return build_financials(collect_model_outputs(engine_result, index), context.months, schema, template)


def annual_totals(financials: FinancialData) -> FinancialData:
    """Sum each block of 12 months; a trailing partial year is summed as is."""
    months = financials.periods
    years = math.ceil(months / 12)
    annual = {
        code: np.array([values[y * 12: min(y * 12 + 12, months)].sum() for y in range(years)], dtype=float)
        for code, values in financials.line_items.items()
    }
    return FinancialData(
        line_items=annual,
        contributors=financials.contributors,
        periods=years,
        frequency="annual",
        template=financials.template,
    )
