"""Component Factory for strategy instantiation.

Builds the record store and the field resolution engine from settings,
caching instances so the catalog cache is shared by every request the
process serves.
"""

import logging

from formflow.core.cache import TTLCache
from formflow.core.config import Settings, get_settings
from formflow.core.events import EventLogger
from formflow.interfaces.form_store import BaseFormRepository
from formflow.strategies.field_resolution import (
    BatchScheduler,
    CatalogLoader,
    FieldMapper,
    FieldResolutionEngine,
    StableIdentityResolver,
    SystemVariableProvider,
    VariableSubstitutionEngine,
)
from formflow.strategies.stores import InMemoryFormRepository, SQLModelFormRepository

logger = logging.getLogger(__name__)


class ComponentFactory:
    """Factory for creating component instances based on configuration.

    Example:
        ```python
        factory = ComponentFactory(get_settings())

        repository = factory.get_form_repository()
        engine = factory.get_engine()
        text = await engine.render("Hi {{firstName}}", form_id, payload)
        ```
    """

    def __init__(self, settings: Settings | None = None) -> None:
        """Initialize the factory with optional settings.

        Args:
            settings: Application settings. If None, uses global settings.
        """
        self._settings = settings or get_settings()
        self._repository_cache: BaseFormRepository | None = None
        self._form_cache: TTLCache | None = None
        self._events_cache: EventLogger | None = None
        self._catalog_loader_cache: CatalogLoader | None = None
        self._resolver_cache: StableIdentityResolver | None = None
        self._system_variables_cache: SystemVariableProvider | None = None
        self._scheduler_cache: BatchScheduler | None = None
        self._substitution_cache: VariableSubstitutionEngine | None = None
        self._mapper_cache: FieldMapper | None = None
        self._engine_cache: FieldResolutionEngine | None = None

    @property
    def settings(self) -> Settings:
        return self._settings

    def get_form_repository(self, store_type: str | None = None) -> BaseFormRepository:
        """Get a record store instance based on the specified type.

        Args:
            store_type: The store type to instantiate. If None, uses settings.

        Returns:
            A BaseFormRepository implementation instance.

        Raises:
            ValueError: If the store type is unknown.
        """
        if self._repository_cache is None or store_type is not None:
            store_type = store_type or self._settings.form_store_type

            logger.info(f"Instantiating form repository: {store_type}")

            match store_type:
                case "sql":
                    # Lazy import: the memory store never touches the database engine
                    from formflow.db.session import get_session_maker

                    self._repository_cache = SQLModelFormRepository(get_session_maker(self._settings))
                case "memory":
                    self._repository_cache = InMemoryFormRepository()
                case _:
                    raise ValueError(
                        f"Unknown form store type: {store_type}. "
                        f"Valid options: 'sql', 'memory'"
                    )

        return self._repository_cache

    def set_form_repository(self, repository: BaseFormRepository) -> None:
        """Use an existing record store and rebuild everything that depends on it."""
        self.clear_cache()
        self._repository_cache = repository

    def get_form_cache(self) -> TTLCache:
        if self._form_cache is None:
            self._form_cache = TTLCache(ttl_seconds=self._settings.form_cache_ttl_seconds)
        return self._form_cache

    def get_event_logger(self) -> EventLogger:
        if self._events_cache is None:
            self._events_cache = EventLogger(category="emails")
        return self._events_cache

    def get_catalog_loader(self) -> CatalogLoader:
        if self._catalog_loader_cache is None:
            logger.info("Instantiating catalog loader")
            self._catalog_loader_cache = CatalogLoader(
                self.get_form_repository(),
                cache=self.get_form_cache(),
                events=self.get_event_logger(),
            )
        return self._catalog_loader_cache

    def get_resolver(self) -> StableIdentityResolver:
        if self._resolver_cache is None:
            logger.info("Instantiating stable identity resolver")
            self._resolver_cache = StableIdentityResolver(
                self.get_catalog_loader(),
                events=self.get_event_logger(),
            )
        return self._resolver_cache

    def get_system_variables(self) -> SystemVariableProvider:
        if self._system_variables_cache is None:
            self._system_variables_cache = SystemVariableProvider(events=self.get_event_logger())
        return self._system_variables_cache

    def get_scheduler(self) -> BatchScheduler:
        if self._scheduler_cache is None:
            self._scheduler_cache = BatchScheduler(
                batch_size=self._settings.substitution_batch_size,
                per_variable_timeout=self._settings.variable_timeout_seconds,
                max_batch_timeout=self._settings.max_batch_timeout_seconds,
                events=self.get_event_logger(),
            )
        return self._scheduler_cache

    def get_substitution_engine(self) -> VariableSubstitutionEngine:
        if self._substitution_cache is None:
            logger.info("Instantiating variable substitution engine")
            self._substitution_cache = VariableSubstitutionEngine(
                self.get_resolver(),
                self.get_system_variables(),
                self.get_scheduler(),
                events=self.get_event_logger(),
            )
        return self._substitution_cache

    def get_field_mapper(self) -> FieldMapper:
        if self._mapper_cache is None:
            self._mapper_cache = FieldMapper(self.get_catalog_loader(), events=self.get_event_logger())
        return self._mapper_cache

    def get_engine(self) -> FieldResolutionEngine:
        """Get the field resolution engine facade.

        Returns:
            A FieldResolutionEngine sharing this factory's catalog cache.
        """
        if self._engine_cache is None:
            self._engine_cache = FieldResolutionEngine(
                resolver=self.get_resolver(),
                substitution=self.get_substitution_engine(),
                mapper=self.get_field_mapper(),
                system_variables=self.get_system_variables(),
                catalog_loader=self.get_catalog_loader(),
            )
        return self._engine_cache

    def clear_cache(self) -> None:
        """Clear all cached component instances.

        This forces new instances (and an empty catalog cache) on next access.
        """
        self._repository_cache = None
        self._form_cache = None
        self._catalog_loader_cache = None
        self._resolver_cache = None
        self._system_variables_cache = None
        self._scheduler_cache = None
        self._substitution_cache = None
        self._mapper_cache = None
        self._engine_cache = None
        logger.debug("Component factory cache cleared")


# Global factory instance
_factory: ComponentFactory | None = None


def get_factory() -> ComponentFactory:
    """Get or create the global ComponentFactory instance.

    Returns:
        The singleton ComponentFactory instance.
    """
    global _factory
    if _factory is None:
        _factory = ComponentFactory()
    return _factory
