"""
Execution engine — output graph, alias-by-alias execution and the pipeline facade.
"""

from .graph import OutputGraph, build_output_graph
from .runner import EngineResult, run_engine
from .pipeline import PipelineResult, run_model

__all__ = [
    "OutputGraph",
    "build_output_graph",
    "EngineResult",
    "run_engine",
    "PipelineResult",
    "run_model",
]
