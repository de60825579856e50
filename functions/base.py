"""
Model function interface.

A model function computes one output alias of one object:

    fn(context, inputs, config) -> {channel or alias: np.ndarray(months)}

``inputs`` are the routed argument series (already gathered by the engine),
``config`` carries the unwrapped assumptions and the declared channels. A
function returns either declared channel names, or a single anonymous series
keyed by the alias (or ``"val"``) that the engine stores under the type's only
channel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Sequence

import numpy as np

from core.config import ModelContext
from core.schema import ChannelSpec
from core.utils import as_series, first_value, sum_series, zeros


@dataclass(frozen=True)
class FunctionConfig:
    object: Mapping[str, object] = field(default_factory=dict)
    output: Mapping[str, object] = field(default_factory=dict)
    channels: Mapping[str, ChannelSpec] = field(default_factory=dict)
    output_names: List[str] = field(default_factory=list)
    output_index: int = 0

    @property
    def alias(self) -> str:
        return self.output_names[0] if self.output_names else "val"

    def _lookup(self, name: str):
        # output-level fields shadow object-level ones
        if name in self.output:
            return self.output[name]
        return self.object.get(name)

    def series(self, name: str, months: int, default: float = 0.0) -> np.ndarray:
        """Assumption ``name`` as a fresh float array (scalar -> constant)."""
        return as_series(self._lookup(name), months, default=default)

    def scalar(self, name: str, default: float = 0.0) -> float:
        """First month's value of assumption ``name``."""
        return first_value(self._lookup(name), default)

    def month(self, name: str, default: int = 0) -> int:
        return int(np.floor(self.scalar(name, default)))


ModelFunction = Callable[[ModelContext, Sequence[np.ndarray], FunctionConfig], Dict[str, np.ndarray]]


def combined_input(inputs: Sequence[np.ndarray], months: int) -> np.ndarray:
    """Elementwise sum of all routed inputs; zeros when there are none."""
    if not inputs:
        return zeros(months)
    return sum_series(inputs, months)


def active_mask(months: int, start_month: int) -> np.ndarray:
    """True from ``start_month`` (0-based) onwards."""
    return np.arange(months) >= start_month
