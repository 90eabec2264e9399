"""System variables: values synthesized rather than looked up.

`timestamp`, `leadId` and `trackingToken` never resolve to "not found";
when the submission lacks them a value is generated.
"""

import random
import time
from collections.abc import Callable
from typing import Any

from formflow.core.events import EventLogger
from formflow.strategies.field_resolution.models import SubmissionPayload
from formflow.strategies.field_resolution.payload import normalize_payload

# Tracking tokens minted before the lead was persisted carry this id prefix.
PLACEHOLDER_ID_PREFIX = "submission-"

_TIMESTAMP_NAMES = frozenset({"timestamp", "time_stamp"})
_LEAD_ID_NAMES = frozenset({"leadid"})
_TRACKING_TOKEN_NAMES = frozenset({"trackingtoken"})


def lead_id_from_tracking_token(token: str) -> str | None:
    """Extract the lead id from '<id>_<timestamp>' or '<id>-<timestamp>'.

    Returns:
        The id part, or None if the token has no separator or carries a
        pre-persistence placeholder id.
    """
    if "_" in token:
        lead_id = token.split("_")[0]
    elif "-" in token:
        lead_id = token.rsplit("-", 1)[0]
    else:
        return None

    if not lead_id or lead_id.startswith(PLACEHOLDER_ID_PREFIX):
        return None
    return lead_id


class SystemVariableProvider:
    """Synthesizes reserved variables.

    Attributes:
        clock: Returns seconds since the epoch; injectable for tests.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        rng: random.Random | None = None,
        events: EventLogger | None = None,
    ) -> None:
        self.clock = clock
        self._rng = rng or random.Random()
        self._events = events or EventLogger()

    @staticmethod
    def is_system_variable(name: str) -> bool:
        lowered = name.strip().lower()
        return lowered in _TIMESTAMP_NAMES or lowered in _LEAD_ID_NAMES or lowered in _TRACKING_TOKEN_NAMES

    def provide(self, name: str, form_id: str, payload: Any) -> str:
        """Produce the value of a system variable.

        Raises:
            KeyError: If `name` is not a system variable.
        """
        lowered = name.strip().lower()
        payload = normalize_payload(payload)

        if lowered in _TIMESTAMP_NAMES:
            value = self.timestamp()
        elif lowered in _LEAD_ID_NAMES:
            value = self.lead_id(form_id, payload)
        elif lowered in _TRACKING_TOKEN_NAMES:
            value = self.tracking_token(form_id, payload)
        else:
            raise KeyError(f"Not a system variable: {name}")

        self._events.info("system_variable.generated", form_id=form_id, variable=name, value=value)
        return value

    def timestamp(self) -> str:
        """Current wall-clock time in epoch milliseconds."""
        return str(int(self.clock() * 1000))

    def lead_id(self, form_id: str, payload: SubmissionPayload) -> str:
        lead_id = payload.truthy("leadId", "lead_id") or payload.truthy("id", "submissionId")

        if not lead_id:
            token = payload.get("trackingToken")
            if token and isinstance(token, str):
                lead_id = lead_id_from_tracking_token(token)

        if not lead_id:
            lead_id = self._fallback_lead_id(form_id)
            self._events.info("system_variable.fallback_lead_id", form_id=form_id, lead_id=lead_id)

        return str(lead_id)

    def tracking_token(self, form_id: str, payload: SubmissionPayload) -> str:
        token = payload.get("trackingToken")
        if token:
            return str(token)

        lead_id = payload.truthy("leadId", "lead_id") or payload.truthy("id", "submissionId")
        if not lead_id:
            lead_id = self._fallback_lead_id(form_id)
        return f"{lead_id}-{self.timestamp()}"

    def _fallback_lead_id(self, form_id: str) -> str:
        return f"lead-{form_id[:8]}-{self._rng.randrange(10000)}"
