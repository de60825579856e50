"""
Core package — run context, error classes, schema models and shared numeric helpers.
No pipeline logic lives here.
"""

from .config import ModelContext
from .errors import CycleError, EngineError, FMError, FMSyntaxError, GraphError, LinkError
from .object_types import DEFAULT_OBJECT_SCHEMA
from .schema import (
    ChannelSpec,
    FieldDescriptor,
    FinancialTemplate,
    LineItem,
    ObjectSchema,
    ObjectTypeSchema,
    Statement,
    Supports,
    load_financial_template,
    load_object_schema,
)

__all__ = [
    "ModelContext",
    "FMError",
    "FMSyntaxError",
    "LinkError",
    "GraphError",
    "CycleError",
    "EngineError",
    "DEFAULT_OBJECT_SCHEMA",
    "ChannelSpec",
    "FieldDescriptor",
    "FinancialTemplate",
    "LineItem",
    "ObjectSchema",
    "ObjectTypeSchema",
    "Statement",
    "Supports",
    "load_financial_template",
    "load_object_schema",
]
