"""
Schema models — the external description of object types and statement templates.

The pipeline never discovers schema; it is always supplied. Raw dicts (or JSON
files) are validated into these pydantic models once, at the boundary:

  ObjectTypeSchema  — per FM type: implementation name, declared channels
                      (with statement destinations) and assumption fields
  FinancialTemplate — statements made of hierarchical line items
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class _SchemaModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)


class Supports(_SchemaModel):
    """Which raw specifications an assumption field accepts."""

    single: bool = False
    annual: bool = False
    growth: bool = False
    monthly: bool = False
    smoothing: bool = False
    date_range: bool = Field(default=False, alias="dateRange")
    seasonal: bool = False


class FieldDescriptor(_SchemaModel):
    name: str
    label: Optional[str] = None
    base_type: Literal["number", "boolean"] = Field(default="number", alias="baseType")
    format: Optional[str] = None
    default: Any = None
    supports: Supports = Field(default_factory=lambda: Supports(single=True))

    @property
    def is_boolean(self) -> bool:
        return self.base_type == "boolean"


class ChannelSpec(_SchemaModel):
    label: Optional[str] = None
    format: Optional[str] = None
    destinations: List[str] = Field(default_factory=list)
    hidden: bool = False


class AssumptionGroups(_SchemaModel):
    object: List[FieldDescriptor] = Field(default_factory=list)
    output: List[FieldDescriptor] = Field(default_factory=list)


class ObjectTypeSchema(_SchemaModel):
    impl: Optional[str] = None
    channels: Dict[str, ChannelSpec] = Field(default_factory=dict)
    assumptions: AssumptionGroups = Field(default_factory=AssumptionGroups)

    def impl_name(self, type_name: str) -> str:
        """Registry key; several FM types may share one implementation."""
        return self.impl or type_name

    @property
    def channel_names(self) -> List[str]:
        return list(self.channels)


ObjectSchema = Dict[str, ObjectTypeSchema]

_OBJECT_SCHEMA_ADAPTER = TypeAdapter(Dict[str, ObjectTypeSchema])


class LineItem(_SchemaModel):
    code: str
    label: Optional[str] = None
    level: int = 0
    sign: Literal[1, -1] = 1
    formula: Optional[str] = None
    cumulative: bool = False
    collapsible: bool = False
    children: Optional[List[str]] = None

    @property
    def depth(self) -> int:
        return len(self.code.split("."))

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    @property
    def is_leaf(self) -> bool:
        return not self.formula and not self.has_children


class Statement(_SchemaModel):
    code: str
    name: str
    description: str = ""
    line_items: List[LineItem] = Field(default_factory=list, alias="lineItems")


class FinancialTemplate(_SchemaModel):
    name: str
    statements: Dict[str, Statement]

    def all_items(self) -> List[LineItem]:
        return [item for st in self.statements.values() for item in st.line_items]

    def find(self, code: str) -> Optional[LineItem]:
        for item in self.all_items():
            if item.code == code:
                return item
        return None

    def leaf_items(self) -> List[LineItem]:
        """Items that can receive model outputs directly."""
        return [item for item in self.all_items() if item.is_leaf]


def _read_json(path: Union[str, os.PathLike]) -> Any:
    return json.loads(Path(path).read_text(encoding="utf-8"))


def load_object_schema(source: Union[Mapping[str, Any], str, os.PathLike]) -> ObjectSchema:
    """Validate a raw mapping (or a JSON file) into ``{type name: ObjectTypeSchema}``."""
    data = source if isinstance(source, Mapping) else _read_json(source)
    return _OBJECT_SCHEMA_ADAPTER.validate_python(dict(data))


def load_financial_template(source: Union[Mapping[str, Any], str, os.PathLike]) -> FinancialTemplate:
    data = source if isinstance(source, Mapping) else _read_json(source)
    return FinancialTemplate.model_validate(dict(data))
