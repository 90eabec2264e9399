"""Core configuration, caching and logging components.

The component factory lives in `formflow.core.factory` and is imported
from there directly; it depends on the strategy packages, which in turn
depend on this package.
"""

from formflow.core.cache import TTLCache
from formflow.core.config import Settings, get_settings
from formflow.core.events import EventLogger

__all__ = [
    "Settings",
    "get_settings",
    "TTLCache",
    "EventLogger",
]
