"""
Model run context.
The whole pipeline is a function of (source, schema, assumptions, overrides, context);
this is the context part.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Mapping, Optional

import pandas as pd
from dateutil import parser as date_parser

# Metadata header keys that may carry the model start date, in priority order.
START_DATE_KEYS = ("StartDate", "DateTime", "Date")


@dataclass(frozen=True)
class ModelContext:
    months: int = 24
    years: Optional[int] = None

    # only used to label exported monthly columns
    start_date: Optional[pd.Timestamp] = None

    def __post_init__(self) -> None:
        months = int(self.months)
        if months < 1:
            raise ValueError(f"months must be >= 1, got {self.months}")
        years = int(self.years) if self.years is not None else math.ceil(months / 12)
        if years < 1:
            raise ValueError(f"years must be >= 1, got {self.years}")
        object.__setattr__(self, "months", months)
        object.__setattr__(self, "years", years)
        if self.start_date is not None:
            object.__setattr__(self, "start_date", pd.Timestamp(self.start_date))

    @classmethod
    def from_metadata(
        cls,
        metadata: Mapping[str, str],
        months: int = 24,
        years: Optional[int] = None,
    ) -> "ModelContext":
        """
        Build a context whose start date comes from the FM metadata header
        (``// DateTime: 2025-10-30``). Unparseable dates are ignored.
        """
        start = None
        for key in START_DATE_KEYS:
            text = metadata.get(key)
            if not text:
                continue
            try:
                start = pd.Timestamp(date_parser.parse(text))
            except (ValueError, OverflowError):
                continue
            break
        return cls(months=months, years=years, start_date=start)
