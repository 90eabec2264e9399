"""Structured event sink for the field resolution pipeline.

Every decision point in the engine (strategy matched, variable not found,
batch timed out, catalog parse failure) emits a named event with
key/value fields instead of a formatted log line.
"""

from typing import Any

import structlog


class EventLogger:
    """Emit structured events tagged with a level and a category.

    The default implementation forwards to a structlog logger. Subclasses
    can override :meth:`emit` to capture events (tests do this).

    Example:
        ```python
        events = EventLogger(category="emails")
        events.info("resolution.strategy_matched", variable="email", strategy="stable_id")
        ```
    """

    def __init__(self, category: str = "forms", logger: Any | None = None) -> None:
        self.category = category
        self._logger = logger or structlog.get_logger("formflow.resolution")

    def emit(self, level: str, event: str, **fields: Any) -> None:
        """Forward one event to the underlying logger.

        Args:
            level: Log level name ('debug', 'info', 'warning', 'error').
            event: Dotted event name, e.g. 'substitution.batch_timeout'.
            **fields: Structured context for the event.
        """
        log_method = getattr(self._logger, level, self._logger.info)
        log_method(event, category=self.category, **fields)

    def debug(self, event: str, **fields: Any) -> None:
        self.emit("debug", event, **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.emit("info", event, **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.emit("warning", event, **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.emit("error", event, **fields)
