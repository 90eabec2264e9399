"""Record store interface for forms, email rules and submissions.

The resolution engine only reads forms. Submission CRUD and rule lookup
are used by the HTTP layer and the worker.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class FormRecord:
    """A stored form definition.

    Attributes:
        id: Form identifier.
        name: Display name.
        sections: JSON string, list of section objects, or None.
        fields: JSON string, list of field objects, or None.
    """

    id: str
    name: str = ""
    sections: Any = None
    fields: Any = None


@dataclass(frozen=True)
class EmailRuleRecord:
    """An email rule whose templates are rendered against submissions."""

    id: str
    form_id: str
    name: str
    recipient_template: str = ""
    subject_template: str = ""
    body_template: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class SubmissionRecord:
    """A stored form submission.

    Attributes:
        id: Submission identifier.
        form_id: Form the submission belongs to.
        data: Raw submission payload (flat mapping or list of {id, value} items).
        tracking_token: Token of the form '<id>_<epoch-ms>'.
        created_at: Creation time.
    """

    id: str
    form_id: str
    data: Any = field(default_factory=dict)
    tracking_token: str | None = None
    created_at: datetime | None = None

    def payload(self) -> Any:
        """Return the payload handed to the engine.

        `submissionId` and `trackingToken` are added unless the stored data
        already carries them: as keys for flat payloads, as {id, value}
        items for item-array payloads.
        """
        if isinstance(self.data, list):
            present = {item.get("id") for item in self.data if isinstance(item, dict)}
            items = list(self.data)
            if "submissionId" not in present:
                items.append({"id": "submissionId", "value": self.id})
            if self.tracking_token and "trackingToken" not in present:
                items.append({"id": "trackingToken", "value": self.tracking_token})
            return items

        if not isinstance(self.data, dict):
            return self.data

        merged: dict[str, Any] = {"submissionId": self.id}
        if self.tracking_token:
            merged["trackingToken"] = self.tracking_token
        merged.update(self.data)
        return merged


class BaseFormRepository(ABC):
    """Abstract base class for record store strategies.

    Example:
        ```python
        class InMemoryFormRepository(BaseFormRepository):
            async def get_form(self, form_id: str) -> FormRecord | None:
                return self._forms.get(form_id)
        ```
    """

    @abstractmethod
    async def get_form(self, form_id: str) -> FormRecord | None:
        """Fetch a form by id.

        Returns:
            The form record, or None if no such form exists.
        """

    @abstractmethod
    async def get_rule(self, rule_id: str) -> EmailRuleRecord | None:
        """Fetch an email rule by id."""

    @abstractmethod
    async def list_rules(self, form_id: str, active_only: bool = True) -> list[EmailRuleRecord]:
        """List the email rules attached to a form."""

    @abstractmethod
    async def create_submission(self, form_id: str, data: Any) -> SubmissionRecord:
        """Store a new submission and assign its id and tracking token."""

    @abstractmethod
    async def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        """Fetch a submission by id."""

    @abstractmethod
    async def update_submission(self, submission_id: str, data: Any) -> SubmissionRecord | None:
        """Replace a submission's data. Returns None if it does not exist."""

    @abstractmethod
    async def delete_submission(self, submission_id: str) -> bool:
        """Delete a submission. Returns True if something was deleted."""

    @abstractmethod
    async def list_submissions(self, form_id: str, limit: int = 50, offset: int = 0) -> list[SubmissionRecord]:
        """List a form's submissions, newest first."""
