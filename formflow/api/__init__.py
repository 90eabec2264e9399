"""FastAPI routers and dependencies."""

from formflow.api.deps import (
    get_component_factory,
    get_engine,
    get_repository,
)
from formflow.api.resolution import router as resolution_router
from formflow.api.submissions import router as submissions_router

__all__ = [
    "get_component_factory",
    "get_engine",
    "get_repository",
    "resolution_router",
    "submissions_router",
]
