"""
Model functions — the computations behind each FM object type.
"""

from .base import FunctionConfig, ModelFunction
from .registry import FN_REGISTRY, with_functions

__all__ = [
    "FunctionConfig",
    "ModelFunction",
    "FN_REGISTRY",
    "with_functions",
]
