"""Unit tests for the ComponentFactory."""

import pytest

from formflow.core.config import Settings
from formflow.core.factory import ComponentFactory
from formflow.strategies.stores.memory import InMemoryFormRepository


class TestComponentFactory:
    """Test suite for ComponentFactory."""

    @pytest.fixture
    def factory(self):
        return ComponentFactory(
            Settings(
                form_store_type="MEMORY",
                substitution_batch_size=3,
                variable_timeout_seconds=1.5,
                max_batch_timeout_seconds=4.0,
                form_cache_ttl_seconds=60,
            )
        )

    def test_store_type_is_normalized(self, factory):
        assert isinstance(factory.get_form_repository(), InMemoryFormRepository)

    def test_unknown_store_type(self, factory):
        with pytest.raises(ValueError, match="Unknown form store type"):
            factory.get_form_repository("mongo")

    def test_instances_are_cached(self, factory):
        assert factory.get_engine() is factory.get_engine()
        assert factory.get_form_cache() is factory.get_form_cache()

    def test_scheduler_uses_settings(self, factory):
        scheduler = factory.get_scheduler()

        assert scheduler.batch_size == 3
        assert scheduler.batch_timeout(["a", "b", "c"]) == 4.0
        assert factory.get_form_cache().ttl_seconds == 60

    def test_set_form_repository_rebuilds_engine(self, factory):
        engine = factory.get_engine()
        repository = InMemoryFormRepository()

        factory.set_form_repository(repository)

        assert factory.get_form_repository() is repository
        assert factory.get_engine() is not engine

    def test_invalid_settings_rejected(self):
        with pytest.raises(ValueError):
            Settings(substitution_batch_size=0)
