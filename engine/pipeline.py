"""
Pipeline facade — source text in, store out.

    parse -> index -> link -> graph -> assumptions -> execute

The run is a pure function of (source, schema, context, assumptions,
overrides): inputs are never mutated and any error aborts the whole run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional

import numpy as np
import pandas as pd

from assumptions.model import ModelAssumptions, build_model_assumptions
from core.config import ModelContext
from core.schema import ObjectSchema
from core.utils import period_labels
from fm.ast import ModelAST
from fm.indexer import SymbolIndex, build_index
from fm.linker import link_fm
from fm.parser import parse_fm
from functions.base import ModelFunction
from functions.registry import FN_REGISTRY

from .graph import OutputGraph, build_output_graph
from .runner import EngineResult, Overrides, run_engine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineResult:
    ast: ModelAST
    index: SymbolIndex
    graph: OutputGraph
    assumptions: ModelAssumptions
    engine: EngineResult
    context: ModelContext

    @property
    def store(self) -> Dict[str, np.ndarray]:
        return self.engine.store

    @property
    def order(self) -> List[str]:
        return self.graph.order

    @property
    def deps(self) -> Dict[str, List[str]]:
        return self.graph.deps

    @property
    def dependents(self) -> Dict[str, List[str]]:
        return self.graph.dependents

    def to_frame(self) -> pd.DataFrame:
        """One row per store key, one column per month."""
        columns = period_labels(self.context.months, self.context.start_date)
        data = {key: series for key, series in self.store.items()}
        frame = pd.DataFrame.from_dict(data, orient="index", columns=columns)
        frame.index.name = "key"
        return frame


def run_model(
    source: str,
    schema: ObjectSchema,
    context: ModelContext,
    *,
    assumptions: Optional[ModelAssumptions] = None,
    overrides: Optional[Overrides] = None,
    registry: Mapping[str, ModelFunction] = FN_REGISTRY,
) -> PipelineResult:
    """
    Run an FM model end to end.

    Parameters
    ----------
    source : str
        FM model text.
    schema : ObjectSchema
        Object types (``core.DEFAULT_OBJECT_SCHEMA`` or a loaded one).
    context : ModelContext
        Horizon.
    assumptions : ModelAssumptions, optional
        Edited assumptions; built from schema defaults when omitted.
    overrides : mapping, optional
        ``{alias: {channel: {month: value}}}``.
    registry : mapping
        Implementation name -> function.

    Returns
    -------
    PipelineResult
    """
    ast = parse_fm(source)
    index = build_index(ast)
    linked = link_fm(ast, index)
    graph = build_output_graph(linked, index)
    if assumptions is None:
        assumptions = build_model_assumptions(linked, index, schema, context)

    engine = run_engine(
        linked,
        index,
        graph,
        assumptions,
        context,
        schema,
        registry=registry,
        overrides=overrides,
    )
    logger.info("Ran %d outputs over %d months", len(graph.order), context.months)
    return PipelineResult(
        ast=linked,
        index=index,
        graph=graph,
        assumptions=assumptions,
        engine=engine,
        context=context,
    )
