"""Concrete strategy implementations."""

from formflow.strategies.field_resolution import FieldResolutionEngine
from formflow.strategies.stores import (
    InMemoryFormRepository,
    SQLModelFormRepository,
)

__all__ = [
    "FieldResolutionEngine",
    "InMemoryFormRepository",
    "SQLModelFormRepository",
]
