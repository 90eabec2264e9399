"""Concrete record store implementations."""

from formflow.strategies.stores.memory import InMemoryFormRepository
from formflow.strategies.stores.sql import SQLModelFormRepository

__all__ = [
    "InMemoryFormRepository",
    "SQLModelFormRepository",
]
