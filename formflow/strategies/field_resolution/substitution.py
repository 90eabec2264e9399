"""Variable substitution engine.

Tokenizes `{{ variable }}` placeholders, resolves each distinct name once
through the system variable provider or the resolver, and substitutes
the results in a single pass.
"""

import re
import time
from typing import Any

from formflow.core.events import EventLogger
from formflow.strategies.field_resolution.models import FieldCatalog
from formflow.strategies.field_resolution.payload import format_value, normalize_payload
from formflow.strategies.field_resolution.resolver import StableIdentityResolver
from formflow.strategies.field_resolution.scheduler import BatchScheduler
from formflow.strategies.field_resolution.system_variables import SystemVariableProvider

# Module-level and shared by every render; holds no match state.
TOKEN_PATTERN = re.compile(r"\{\{\s*([^{}]+?)\s*\}\}")


def extract_variables(template: str) -> list[str]:
    """Return distinct variable names in order of first appearance."""
    if not template:
        return []
    names = (m.group(1).strip() for m in TOKEN_PATTERN.finditer(template))
    return list(dict.fromkeys(name for name in names if name))


def substitute(template: str, replacements: dict[str, str]) -> str:
    """Replace every token; names missing from `replacements` become empty strings."""
    return TOKEN_PATTERN.sub(lambda m: replacements.get(m.group(1).strip(), ""), template)


class VariableSubstitutionEngine:
    """Renders templates against a form submission.

    Example:
        ```python
        engine = VariableSubstitutionEngine(resolver, SystemVariableProvider(), BatchScheduler())
        text = await engine.render("Hi {{firstName}}", "form2_abc", {"f1": "Ada"})
        ```
    """

    def __init__(
        self,
        resolver: StableIdentityResolver,
        system_variables: SystemVariableProvider,
        scheduler: BatchScheduler,
        events: EventLogger | None = None,
    ) -> None:
        self._resolver = resolver
        self._system_variables = system_variables
        self._scheduler = scheduler
        self._events = events or EventLogger()

    async def render(self, template: str, form_id: str, payload: Any) -> str:
        """Render one template. Never raises.

        Unresolved variables become empty strings. If the pipeline fails
        outside individual variable resolution (e.g. the form lookup fails),
        the template is returned unchanged.
        """
        rendered = await self.render_many([template], form_id, payload)
        return rendered[0]

    async def render_many(self, templates: list[str], form_id: str, payload: Any) -> list[str]:
        """Render several templates against one submission, sharing one resolution pass."""
        started = time.monotonic()
        try:
            names = list(dict.fromkeys(name for t in templates if isinstance(t, str) for name in extract_variables(t)))
            self._events.info("substitution.started", form_id=form_id, variables=names)
            normalized = normalize_payload(payload)

            catalog: FieldCatalog | None = None
            if any(not self._system_variables.is_system_variable(name) for name in names):
                catalog = await self._resolver.load_catalog(form_id)

            async def resolve(name: str) -> str:
                return await self._resolve_text(name, form_id, normalized, catalog)

            replacements = await self._scheduler.run(names, resolve)
            rendered = [substitute(t, replacements) if isinstance(t, str) else t for t in templates]

            self._events.info(
                "substitution.completed",
                form_id=form_id,
                variables=len(names),
                resolved=sum(1 for v in replacements.values() if v),
                elapsed_ms=round((time.monotonic() - started) * 1000, 2),
            )
            return rendered

        except Exception as e:
            self._events.error("substitution.failed", form_id=form_id, error=str(e))
            return list(templates)

    async def _resolve_text(
        self,
        name: str,
        form_id: str,
        payload: Any,
        catalog: FieldCatalog | None,
    ) -> str:
        try:
            if self._system_variables.is_system_variable(name):
                return self._system_variables.provide(name, form_id, payload)

            result = await self._resolver.resolve(form_id, name, payload, catalog=catalog)
            return format_value(result.value) if result.found else ""
        except Exception as e:
            self._events.error("resolution.failed", form_id=form_id, variable=name, error=str(e))
            return ""
