"""Batch scheduler for variable resolution.

Distinct variable names are split into fixed-size batches. Batches run
strictly one after another; inside a batch every variable is resolved
concurrently under one shared timeout.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from formflow.core.events import EventLogger


class BatchScheduler:
    """Runs resolutions in timed batches.

    A batch that times out or fails yields an empty string for each of its
    variables; later batches still run.

    Attributes:
        batch_size: Variables per batch.
        per_variable_timeout: Seconds allowed per variable in a batch.
        max_batch_timeout: Upper bound for any batch's timeout, in seconds.
    """

    def __init__(
        self,
        batch_size: int = 5,
        per_variable_timeout: float = 3.0,
        max_batch_timeout: float = 15.0,
        events: EventLogger | None = None,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.batch_size = batch_size
        self.per_variable_timeout = per_variable_timeout
        self.max_batch_timeout = max_batch_timeout
        self._events = events or EventLogger()

    def partition(self, names: Sequence[str]) -> list[list[str]]:
        """Split names into consecutive batches of at most batch_size."""
        return [list(names[i : i + self.batch_size]) for i in range(0, len(names), self.batch_size)]

    def batch_timeout(self, batch: Sequence[str]) -> float:
        return min(self.per_variable_timeout * len(batch), self.max_batch_timeout)

    async def run(
        self,
        names: Sequence[str],
        resolve: Callable[[str], Awaitable[str]],
    ) -> dict[str, str]:
        """Resolve every name, batch by batch.

        Args:
            names: Distinct variable names.
            resolve: Coroutine function producing the replacement text for one name.

        Returns:
            name -> replacement text for every name (empty string on timeout or failure).
        """
        replacements: dict[str, str] = {}

        for index, batch in enumerate(self.partition(names)):
            timeout = self.batch_timeout(batch)
            self._events.debug("substitution.batch_started", batch=index, size=len(batch), timeout=timeout)

            try:
                values = await asyncio.wait_for(
                    asyncio.gather(*(resolve(name) for name in batch)),
                    timeout=timeout,
                )
                replacements.update(zip(batch, values))
            except asyncio.TimeoutError:
                self._events.error("substitution.batch_timeout", batch=index, variables=batch, timeout=timeout)
                replacements.update(dict.fromkeys(batch, ""))
            except Exception as e:
                self._events.error("substitution.batch_failed", batch=index, variables=batch, error=str(e))
                replacements.update(dict.fromkeys(batch, ""))

        return replacements
