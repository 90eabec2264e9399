"""Special-field recognizer.

Classifies field descriptors into a fixed vocabulary of semantic roles
(email, phone, name, ...) from their declared type and from their label,
and looks up a role's value in a submission.
"""

import enum
from collections.abc import Mapping
from typing import Any

from formflow.core.events import EventLogger
from formflow.strategies.field_resolution.models import FieldCatalog, FieldDescriptor, SubmissionPayload


class SemanticRole(str, enum.Enum):
    """Well-known meanings a field can carry, keyed by their alias name."""

    EMAIL = "email"
    PHONE = "phone"
    NAME = "name"
    FIRST_NAME = "firstName"
    LAST_NAME = "lastName"
    COMPANY = "company"
    ADDRESS = "address"
    CITY = "city"
    STATE = "state"
    ZIP = "zip"
    COUNTRY = "country"

    @classmethod
    def from_variable(cls, variable_name: str) -> "SemanticRole | None":
        """Match a variable name to a role, ignoring case."""
        lowered = variable_name.lower()
        return next((role for role in cls if role.value.lower() == lowered), None)


_FIRST_NAME_MARKERS = ("firstname", "first_name", "first-name")
_LAST_NAME_MARKERS = ("lastname", "last_name", "last-name")
_COMPANY_MARKERS = ("company", "organization", "business")


def roles_by_type(field: FieldDescriptor) -> list[SemanticRole]:
    """Roles implied by the declared field type.

    Generic text fields are classified from their id. An id mentioning
    'first' or 'last' never maps to the generic 'name' role.
    """
    if not field.type:
        return []

    match field.type.lower():
        case "email":
            return [SemanticRole.EMAIL]
        case "tel" | "phone":
            return [SemanticRole.PHONE]
        case "name":
            return [SemanticRole.NAME]
        case "text":
            id_lower = field.id.lower()
            if any(marker in id_lower for marker in _FIRST_NAME_MARKERS):
                return [SemanticRole.FIRST_NAME]
            if any(marker in id_lower for marker in _LAST_NAME_MARKERS):
                return [SemanticRole.LAST_NAME]
            if "name" in id_lower and "first" not in id_lower and "last" not in id_lower:
                return [SemanticRole.NAME]
            if any(marker in id_lower for marker in _COMPANY_MARKERS):
                return [SemanticRole.COMPANY]
    return []


def roles_by_label(field: FieldDescriptor) -> list[SemanticRole]:
    """Roles implied by substrings of the human label. A label may imply several."""
    if not field.label:
        return []

    label = field.label.lower()
    roles = []
    if "email" in label:
        roles.append(SemanticRole.EMAIL)
    if "phone" in label or "tel" in label:
        roles.append(SemanticRole.PHONE)
    if "name" in label and "first" not in label and "last" not in label:
        roles.append(SemanticRole.NAME)
    if "first name" in label:
        roles.append(SemanticRole.FIRST_NAME)
    if "last name" in label:
        roles.append(SemanticRole.LAST_NAME)
    if any(marker in label for marker in _COMPANY_MARKERS):
        roles.append(SemanticRole.COMPANY)
    if "address" in label and "email" not in label:
        roles.append(SemanticRole.ADDRESS)
    if "city" in label:
        roles.append(SemanticRole.CITY)
    if "state" in label or "province" in label:
        roles.append(SemanticRole.STATE)
    if "zip" in label or "postal" in label:
        roles.append(SemanticRole.ZIP)
    if "country" in label:
        roles.append(SemanticRole.COUNTRY)
    return roles


class SpecialFieldRecognizer:
    """Adds semantic aliases for a field's value to a shared mapping.

    The label pass runs first and the type pass second, so a role derived
    from the declared type overwrites one guessed from label text.
    """

    def __init__(self, events: EventLogger | None = None) -> None:
        self._events = events or EventLogger()

    def map_by_label(self, field: FieldDescriptor, value: Any, mapped: dict[str, Any]) -> None:
        for role in roles_by_label(field):
            mapped[role.value] = value
            self._events.debug("mapping.alias_added", field_id=field.id, alias=role.value, source="label")

    def map_by_type(self, field: FieldDescriptor, value: Any, mapped: dict[str, Any]) -> None:
        for role in roles_by_type(field):
            mapped[role.value] = value
            self._events.debug("mapping.alias_added", field_id=field.id, alias=role.value, source="type")

    def recognize(self, field: FieldDescriptor, value: Any) -> dict[str, Any]:
        """Return role -> value for one field, combining both passes."""
        mapped: dict[str, Any] = {}
        self.map_by_label(field, value, mapped)
        self.map_by_type(field, value, mapped)
        return mapped

    def map_item_array(
        self,
        items: list[Any],
        catalog: FieldCatalog,
        mapped: dict[str, Any],
    ) -> None:
        """Coarse email/phone/name mapping for item-array submissions.

        A field typed 'name' populates the generic 'name' alias even when
        it represents something narrower.
        """
        for index, item in enumerate(items):
            if not isinstance(item, Mapping) or not item.get("id") or "value" not in item:
                continue
            field = catalog.by_id(str(item["id"]))
            if field is None:
                continue

            label = (field.label or "").lower()
            if field.type == "email" or "email" in label:
                alias = SemanticRole.EMAIL
            elif field.type in ("tel", "phone") or "phone" in label or "tel" in label:
                alias = SemanticRole.PHONE
            elif field.type == "name" or "name" in label:
                alias = SemanticRole.NAME
            else:
                continue

            mapped[alias.value] = item["value"]
            self._events.debug("mapping.alias_added", field_id=field.id, alias=alias.value, source="item", index=index)


def find_email_in_payload(payload: SubmissionPayload) -> tuple[str, Any] | None:
    """Scan payload keys for an email-looking entry.

    Returns:
        (key, value) for the first key containing 'email' whose string value contains '@'.
    """
    for key, value in payload.values.items():
        if "email" in key.lower() and isinstance(value, str) and "@" in value:
            return key, value
    return None


def find_role_value(
    role: SemanticRole,
    catalog: FieldCatalog,
    payload: SubmissionPayload,
) -> tuple[Any, str] | None:
    """Look up the value for a semantic role.

    Preference order: a field whose declared type implies the role, then a
    field whose label implies it, then (email only) a field whose id
    contains 'email', then (email only) a raw scan of payload keys.

    Returns:
        (value, tier) where tier names the matching rule, or None.
    """
    for tier, classify in (("type", roles_by_type), ("label", roles_by_label)):
        field = catalog.find(lambda f: role in classify(f) and payload.has(f.id))
        if field is not None:
            return payload.get(field.id), tier

    if role is SemanticRole.EMAIL:
        field = catalog.find(lambda f: "email" in f.id.lower() and payload.has(f.id))
        if field is not None:
            return payload.get(field.id), "field_id"

        found = find_email_in_payload(payload)
        if found is not None:
            return found[1], "payload_key"

    return None
