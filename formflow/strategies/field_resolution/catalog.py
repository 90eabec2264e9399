"""Field catalog extraction and loading.

Flattens a form's sections and top-level fields (each possibly a JSON
string, an already-parsed list, or absent) into one ordered list of
field descriptors.
"""

import json
import re
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from formflow.core.cache import TTLCache
from formflow.core.events import EventLogger
from formflow.interfaces.form_store import BaseFormRepository, FormRecord
from formflow.strategies.field_resolution.models import FieldCatalog, FieldDescriptor

_SEPARATOR_THEN_CHAR = re.compile(r"[^a-zA-Z0-9]+(.)")
_NON_ALNUM = re.compile(r"[^a-zA-Z0-9]+")


def to_camel_case(text: str) -> str:
    """Convert a human label to a camelCase key.

    "Your Email" -> "yourEmail", "First name:" -> "firstName".
    """
    result = _SEPARATOR_THEN_CHAR.sub(lambda m: m.group(1).upper(), text.lower())
    result = _NON_ALNUM.sub("", result)
    return result[:1].lower() + result[1:]


def extract_fields_from_form(form: FormRecord | Mapping[str, Any], events: EventLogger | None = None) -> list[FieldDescriptor]:
    """Flatten all fields of a form. Never raises.

    Malformed JSON in `sections` or `fields` is logged and that source
    contributes nothing; the other source is still read.

    Args:
        form: A FormRecord or a mapping with optional 'sections' and 'fields'.
        events: Sink for parse-failure events.

    Returns:
        Descriptors from every section in order, followed by top-level fields.
    """
    events = events or EventLogger()
    if isinstance(form, Mapping):
        sections, fields = form.get("sections"), form.get("fields")
    else:
        sections, fields = form.sections, form.fields

    all_fields: list[FieldDescriptor] = []

    sections_data = _parse_json_source(sections, "sections", events)
    if isinstance(sections_data, list):
        for section in sections_data:
            section_fields = section.get("fields") if isinstance(section, Mapping) else None
            if isinstance(section_fields, list):
                all_fields.extend(_to_descriptors(section_fields, events))

    fields_data = _parse_json_source(fields, "fields", events)
    if isinstance(fields_data, list):
        all_fields.extend(_to_descriptors(fields_data, events))

    return all_fields


def _parse_json_source(raw: Any, source: str, events: EventLogger) -> Any:
    if not raw:
        return None
    if not isinstance(raw, (str, bytes)):
        return raw
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        events.error("catalog.parse_failed", source=source, error=str(e))
        return None


def _to_descriptors(raw_fields: list[Any], events: EventLogger) -> list[FieldDescriptor]:
    descriptors = []
    for raw in raw_fields:
        if isinstance(raw, FieldDescriptor):
            descriptors.append(raw)
            continue
        if not isinstance(raw, Mapping):
            continue
        try:
            descriptors.append(FieldDescriptor.model_validate(raw))
        except ValidationError as e:
            events.error("catalog.field_invalid", field_id=raw.get("id"), error=str(e))
    return descriptors


class CatalogLoader:
    """Fetches forms from the record store and caches their field catalogs.

    The cache is injected and owned by the caller; pass None to disable it.
    """

    def __init__(
        self,
        repository: BaseFormRepository,
        cache: TTLCache | None = None,
        events: EventLogger | None = None,
    ) -> None:
        self._repository = repository
        self._cache = cache
        self._events = events or EventLogger()

    async def load(self, form_id: str) -> FieldCatalog:
        """Return the catalog for a form.

        An unknown form yields an empty catalog. Record store errors propagate.
        """
        if self._cache is not None:
            cached = self._cache.get(form_id)
            if cached is not None:
                self._events.debug("catalog.cache_hit", form_id=form_id, field_count=len(cached))
                return cached

        form = await self._repository.get_form(form_id)
        if form is None:
            self._events.error("catalog.form_not_found", form_id=form_id)
            return FieldCatalog.empty(form_id)

        catalog = FieldCatalog(
            form_id=form_id,
            fields=tuple(extract_fields_from_form(form, self._events)),
        )
        self._events.info("catalog.loaded", form_id=form_id, field_count=len(catalog))

        if self._cache is not None:
            self._cache.set(form_id, catalog)
        return catalog

    def invalidate(self, form_id: str) -> None:
        """Forget a cached catalog, e.g. after the form was edited."""
        if self._cache is not None:
            self._cache.invalidate(form_id)
