"""Field mapper: flattened "mapped view" of a submission.

Where the resolver answers one variable at a time, the mapper produces
every alias it can derive for a whole submission (stable ids, custom
mappings, camelCase labels, semantic roles), and maps a single field id
to its best alias.
"""

from collections.abc import Mapping
from typing import Any

from formflow.core.events import EventLogger
from formflow.strategies.field_resolution.catalog import CatalogLoader, to_camel_case
from formflow.strategies.field_resolution.payload import normalize_payload
from formflow.strategies.field_resolution.special_fields import (
    SemanticRole,
    SpecialFieldRecognizer,
    find_email_in_payload,
)


class FieldMapper:
    """Derives aliases for submission values from the form definition."""

    def __init__(
        self,
        catalog_loader: CatalogLoader,
        recognizer: SpecialFieldRecognizer | None = None,
        events: EventLogger | None = None,
    ) -> None:
        self._catalog_loader = catalog_loader
        self._events = events or EventLogger()
        self._recognizer = recognizer or SpecialFieldRecognizer(self._events)

    async def resolve_all_mappings(self, form_id: str, payload: Any) -> dict[str, Any]:
        """Return a new mapping of the original keys plus every derivable alias.

        The input payload is not modified. On any failure the original
        (unmapped) keys are returned.

        Args:
            form_id: Form the submission belongs to.
            payload: Flat mapping or list of {id, value} items.

        Returns:
            Original keys plus aliases: field id, stable id, mapping,
            camelCase label, and semantic roles.
        """
        normalized = normalize_payload(payload)
        original = dict(payload) if isinstance(payload, Mapping) else dict(normalized.values)

        try:
            mapped = dict(original)
            catalog = await self._catalog_loader.load(form_id)

            for field in catalog:
                if not field.id or not normalized.has(field.id):
                    continue

                value = normalized.get(field.id)
                mapped[field.id] = value

                if field.stable_id:
                    mapped[field.stable_id] = value
                    self._events.debug("mapping.alias_added", field_id=field.id, alias=field.stable_id, source="stable_id")

                if field.mapping:
                    mapped[field.mapping] = value
                    self._events.debug("mapping.alias_added", field_id=field.id, alias=field.mapping, source="mapping")

                if field.label:
                    camel = to_camel_case(field.label)
                    if camel and camel != field.mapping:
                        mapped[camel] = value
                        self._events.debug("mapping.alias_added", field_id=field.id, alias=camel, source="label")
                    self._recognizer.map_by_label(field, value, mapped)

                self._recognizer.map_by_type(field, value, mapped)

            if normalized.is_item_array and isinstance(payload, (list, tuple)):
                self._recognizer.map_item_array(list(payload), catalog, mapped)

            if not mapped.get(SemanticRole.EMAIL.value):
                found = find_email_in_payload(normalized)
                if found is not None:
                    mapped[SemanticRole.EMAIL.value] = found[1]
                    self._events.debug("mapping.alias_added", field_id=found[0], alias="email", source="payload_key")

            self._events.info("mapping.completed", form_id=form_id, keys=len(mapped), original_keys=len(original))
            return mapped

        except Exception as e:
            self._events.error("mapping.failed", form_id=form_id, error=str(e))
            return original

    async def resolve_one(self, form_id: str, field_id: str) -> str:
        """Map one field id to its best alias.

        Preference: stable id, then mapping, then camelCase label, then the id itself.
        """
        try:
            catalog = await self._catalog_loader.load(form_id)
            field = catalog.by_id(field_id)
            if field is None:
                self._events.error("mapping.field_not_found", form_id=form_id, field_id=field_id)
                return field_id

            if field.stable_id:
                return field.stable_id
            if field.mapping:
                return field.mapping
            if field.label:
                camel = to_camel_case(field.label)
                if camel:
                    return camel
            return field_id

        except Exception as e:
            self._events.error("mapping.failed", form_id=form_id, field_id=field_id, error=str(e))
            return field_id
