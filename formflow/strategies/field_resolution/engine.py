"""Field resolution engine facade.

Bundles the resolver, system variables, batch scheduler, substitution
engine and field mapper behind the operations the rest of the
application calls. Every operation is total: it returns a value and
never raises.
"""

from typing import Any

from formflow.core.cache import TTLCache
from formflow.core.events import EventLogger
from formflow.interfaces.form_store import BaseFormRepository, EmailRuleRecord
from formflow.interfaces.resolution import ResolutionResult
from formflow.strategies.field_resolution.catalog import CatalogLoader
from formflow.strategies.field_resolution.mapper import FieldMapper
from formflow.strategies.field_resolution.resolver import StableIdentityResolver
from formflow.strategies.field_resolution.scheduler import BatchScheduler
from formflow.strategies.field_resolution.substitution import VariableSubstitutionEngine, extract_variables
from formflow.strategies.field_resolution.system_variables import SystemVariableProvider


class FieldResolutionEngine:
    """Entry point for template rendering and field mapping.

    Example:
        ```python
        engine = FieldResolutionEngine.build(repository, cache=TTLCache(300))
        body = await engine.render("Contact: {{item_email}}", "form2_abc", {"f1": "a@b.com"})
        ```
    """

    def __init__(
        self,
        resolver: StableIdentityResolver,
        substitution: VariableSubstitutionEngine,
        mapper: FieldMapper,
        system_variables: SystemVariableProvider,
        catalog_loader: CatalogLoader,
    ) -> None:
        self._resolver = resolver
        self._substitution = substitution
        self._mapper = mapper
        self._system_variables = system_variables
        self._catalog_loader = catalog_loader

    @classmethod
    def build(
        cls,
        repository: BaseFormRepository,
        cache: TTLCache | None = None,
        batch_size: int = 5,
        per_variable_timeout: float = 3.0,
        max_batch_timeout: float = 15.0,
        events: EventLogger | None = None,
        system_variables: SystemVariableProvider | None = None,
    ) -> "FieldResolutionEngine":
        """Wire a complete engine around a record store."""
        events = events or EventLogger()
        catalog_loader = CatalogLoader(repository, cache=cache, events=events)
        resolver = StableIdentityResolver(catalog_loader, events=events)
        system_variables = system_variables or SystemVariableProvider(events=events)
        scheduler = BatchScheduler(
            batch_size=batch_size,
            per_variable_timeout=per_variable_timeout,
            max_batch_timeout=max_batch_timeout,
            events=events,
        )
        return cls(
            resolver=resolver,
            substitution=VariableSubstitutionEngine(resolver, system_variables, scheduler, events=events),
            mapper=FieldMapper(catalog_loader, events=events),
            system_variables=system_variables,
            catalog_loader=catalog_loader,
        )

    async def render(self, template: str, form_id: str, payload: Any) -> str:
        return await self._substitution.render(template, form_id, payload)

    async def render_many(self, templates: list[str], form_id: str, payload: Any) -> list[str]:
        return await self._substitution.render_many(templates, form_id, payload)

    async def resolve_all_mappings(self, form_id: str, payload: Any) -> dict[str, Any]:
        return await self._mapper.resolve_all_mappings(form_id, payload)

    async def resolve_one(self, form_id: str, field_id: str) -> str:
        return await self._mapper.resolve_one(form_id, field_id)

    async def resolve_variable(self, form_id: str, variable_name: str, payload: Any) -> ResolutionResult:
        """Resolve one variable, system variables included."""
        if self._system_variables.is_system_variable(variable_name):
            return ResolutionResult.hit(
                self._system_variables.provide(variable_name, form_id, payload),
                "system_variable",
            )
        return await self._resolver.resolve(form_id, variable_name, payload)

    async def render_rule(self, rule: EmailRuleRecord, payload: Any) -> dict[str, str]:
        """Render an email rule's recipient, subject and body in one resolution pass."""
        recipient, subject, body = await self.render_many(
            [rule.recipient_template, rule.subject_template, rule.body_template],
            rule.form_id,
            payload,
        )
        return {"recipient": recipient, "subject": subject, "body": body}

    @staticmethod
    def extract_variables(template: str) -> list[str]:
        return extract_variables(template)

    def invalidate_form(self, form_id: str) -> None:
        """Drop the cached field catalog of an edited form."""
        self._catalog_loader.invalidate(form_id)
