import pytest

from core.config import ModelContext
from core.object_types import DEFAULT_OBJECT_SCHEMA
from core.schema import load_object_schema


@pytest.fixture
def ctx():
    return ModelContext(months=12)


@pytest.fixture
def ctx6():
    return ModelContext(months=6)


@pytest.fixture
def schema():
    return DEFAULT_OBJECT_SCHEMA


@pytest.fixture
def small_schema():
    """Minimal types for engine tests: one-channel pass-through, two-channel split, no-channel type."""
    return load_object_schema(
        {
            "Src": {
                "impl": "QuantStart",
                "channels": {"val": {"label": "Value"}},
                "assumptions": {
                    "object": [],
                    "output": [
                        {"name": "amount", "default": 5, "supports": {"single": True, "monthly": True}},
                        {"name": "startMonth", "default": 0},
                    ],
                },
            },
            "Add": {"impl": "Sum", "channels": {"val": {}}},
            "Mul": {
                "impl": "Multiply",
                "channels": {"val": {}},
                "assumptions": {"output": [{"name": "factor", "default": 2}, {"name": "startMonth", "default": 0}]},
            },
            "Retain": {
                "impl": "SubRetain",
                "channels": {"act": {}, "chu": {}},
                "assumptions": {
                    "output": [
                        {"name": "churn", "default": 0.1},
                        {"name": "startMonth", "default": 0},
                    ]
                },
            },
            "Split": {"impl": "Sum", "channels": {"a": {}, "b": {}}},
            "Bare": {"impl": "Sum", "channels": {}},
            "Ghost": {"impl": "NoSuchFunction", "channels": {"val": {}}},
        }
    )
