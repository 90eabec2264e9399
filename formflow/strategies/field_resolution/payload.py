"""Submission payload normalization.

Submissions arrive either as a flat mapping of fieldId -> value or as a
list of {id, value} items. Both are normalized into a SubmissionPayload
before any resolution strategy runs.
"""

import logging
from collections.abc import Mapping
from typing import Any

from formflow.strategies.field_resolution.models import MappedField, SubmissionPayload

logger = logging.getLogger(__name__)

MAPPED_FIELDS_KEY = "__mappedFields"


def normalize_payload(payload: Any) -> SubmissionPayload:
    """Normalize a raw payload. Never raises.

    Args:
        payload: A mapping, a list of {id, value} items, a SubmissionPayload, or anything else.

    Returns:
        The normalized payload; unrecognized input yields an empty payload.
    """
    if isinstance(payload, SubmissionPayload):
        return payload

    if isinstance(payload, Mapping):
        values = {str(k): v for k, v in payload.items() if k != MAPPED_FIELDS_KEY}
        return SubmissionPayload(
            values=values,
            mapped_fields=_parse_mapped_fields(payload.get(MAPPED_FIELDS_KEY)),
            shape="flat",
        )

    if isinstance(payload, (list, tuple)):
        values: dict[str, Any] = {}
        for item in payload:
            if isinstance(item, Mapping) and item.get("id") and "value" in item:
                values[str(item["id"])] = item["value"]
        return SubmissionPayload(values=values, shape="items")

    if payload is not None:
        logger.warning(f"Unsupported payload type {type(payload).__name__}, treating as empty")
    return SubmissionPayload()


def _parse_mapped_fields(raw: Any) -> tuple[MappedField, ...]:
    """Collect {displayKey, value} entries from a dict- or list-shaped structure."""
    if isinstance(raw, Mapping):
        entries = raw.values()
    elif isinstance(raw, (list, tuple)):
        entries = raw
    else:
        return ()

    mapped = []
    for entry in entries:
        if isinstance(entry, Mapping) and entry.get("displayKey"):
            mapped.append(MappedField(display_key=str(entry["displayKey"]), value=entry.get("value")))
    return tuple(mapped)


def format_value(value: Any) -> str:
    """Render a resolved value for substitution into a template."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(format_value(v) for v in value)
    return str(value)
