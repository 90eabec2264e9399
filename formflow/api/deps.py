"""FastAPI dependencies for dependency injection.

Provides reusable dependencies for routes including:
- The component factory
- The record store
- The field resolution engine
"""

import logging

from fastapi import Depends, HTTPException, status

from formflow.core.factory import ComponentFactory, get_factory
from formflow.interfaces.form_store import BaseFormRepository
from formflow.strategies.field_resolution import FieldResolutionEngine

logger = logging.getLogger(__name__)


def get_component_factory() -> ComponentFactory:
    """Dependency returning the process-wide component factory."""
    return get_factory()


def get_repository(
    factory: ComponentFactory = Depends(get_component_factory),
) -> BaseFormRepository:
    """Dependency for the configured record store.

    Raises:
        HTTPException: If the store cannot be instantiated.
    """
    try:
        return factory.get_form_repository()
    except Exception as e:
        logger.error(f"Error instantiating form repository: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Record store unavailable",
        ) from e


def get_engine(
    factory: ComponentFactory = Depends(get_component_factory),
) -> FieldResolutionEngine:
    """Dependency for the field resolution engine.

    Raises:
        HTTPException: If the engine cannot be instantiated.
    """
    try:
        return factory.get_engine()
    except Exception as e:
        logger.error(f"Error instantiating field resolution engine: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Field resolution engine unavailable",
        ) from e
