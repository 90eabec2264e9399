"""Stable identity resolver.

Runs the ordered strategy chain as a short-circuiting fold: the first
strategy that produces a value wins. The form's field catalog is only
fetched once a strategy that needs it is reached.
"""

from collections.abc import Sequence
from typing import Any

from formflow.core.events import EventLogger
from formflow.interfaces.resolution import BaseResolutionStrategy, ResolutionRequest, ResolutionResult
from formflow.strategies.field_resolution.catalog import CatalogLoader
from formflow.strategies.field_resolution.models import FieldCatalog
from formflow.strategies.field_resolution.payload import normalize_payload
from formflow.strategies.field_resolution.strategies import default_strategies


class StableIdentityResolver:
    """Resolves a variable name to a submission value.

    Example:
        ```python
        resolver = StableIdentityResolver(CatalogLoader(repository))
        result = await resolver.resolve("form2_abc", "item_email", {"f1": "a@b.com"})
        if result.found:
            print(result.value, result.strategy)
        ```
    """

    def __init__(
        self,
        catalog_loader: CatalogLoader,
        strategies: Sequence[BaseResolutionStrategy] | None = None,
        events: EventLogger | None = None,
    ) -> None:
        self._catalog_loader = catalog_loader
        self._strategies = list(strategies) if strategies is not None else default_strategies()
        self._events = events or EventLogger(category="emails")

    @property
    def strategies(self) -> list[BaseResolutionStrategy]:
        return list(self._strategies)

    async def load_catalog(self, form_id: str) -> FieldCatalog:
        """Fetch the form's catalog. Record store errors propagate."""
        return await self._catalog_loader.load(form_id)

    async def resolve(
        self,
        form_id: str,
        variable_name: str,
        payload: Any,
        catalog: FieldCatalog | None = None,
    ) -> ResolutionResult:
        """Resolve one variable. Never raises; any failure is a miss.

        Args:
            form_id: Form the submission belongs to.
            variable_name: Variable as written in the template.
            payload: Raw or normalized submission payload.
            catalog: Preloaded catalog; fetched lazily when omitted.

        Returns:
            The first strategy hit, or a miss.
        """
        try:
            request = ResolutionRequest(
                form_id=form_id,
                variable_name=variable_name.strip(),
                payload=normalize_payload(payload),
            )

            for strategy in self._strategies:
                if strategy.uses_catalog and catalog is None:
                    catalog = await self.load_catalog(form_id)
                result = strategy.resolve(request, catalog if catalog is not None else FieldCatalog.empty(form_id))
                if result.found:
                    self._events.info(
                        "resolution.strategy_matched",
                        form_id=form_id,
                        variable=request.variable_name,
                        strategy=strategy.name,
                    )
                    return result
                self._events.debug(
                    "resolution.strategy_missed",
                    form_id=form_id,
                    variable=request.variable_name,
                    strategy=strategy.name,
                )

            self._events.info("resolution.not_found", form_id=form_id, variable=request.variable_name)
            return ResolutionResult.miss()

        except Exception as e:
            self._events.error("resolution.failed", form_id=form_id, variable=variable_name, error=str(e))
            return ResolutionResult.miss()
