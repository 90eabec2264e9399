"""In-memory record store.

Used by tests and by the service when `FORM_STORE_TYPE=memory`.
"""

import copy
import logging
import time
import uuid
from datetime import datetime, timezone
from typing import Any

from formflow.interfaces.form_store import (
    BaseFormRepository,
    EmailRuleRecord,
    FormRecord,
    SubmissionRecord,
)

logger = logging.getLogger(__name__)


def make_tracking_token(submission_id: str, clock=time.time) -> str:
    """Build a tracking token of the form '<submission id>_<epoch ms>'."""
    return f"{submission_id}_{int(clock() * 1000)}"


class InMemoryFormRepository(BaseFormRepository):
    """Dict-backed record store.

    Example:
        ```python
        repo = InMemoryFormRepository()
        repo.add_form(FormRecord(id="form2_abc", fields=[{"id": "f1", "type": "email"}]))
        submission = await repo.create_submission("form2_abc", {"f1": "a@b.com"})
        ```
    """

    def __init__(
        self,
        forms: list[FormRecord] | None = None,
        rules: list[EmailRuleRecord] | None = None,
    ) -> None:
        self._forms: dict[str, FormRecord] = {}
        self._rules: dict[str, EmailRuleRecord] = {}
        self._submissions: dict[str, SubmissionRecord] = {}

        for form in forms or []:
            self.add_form(form)
        for rule in rules or []:
            self.add_rule(rule)

    def add_form(self, form: FormRecord) -> None:
        self._forms[form.id] = form

    def add_rule(self, rule: EmailRuleRecord) -> None:
        self._rules[rule.id] = rule

    async def get_form(self, form_id: str) -> FormRecord | None:
        return self._forms.get(form_id)

    async def get_rule(self, rule_id: str) -> EmailRuleRecord | None:
        return self._rules.get(rule_id)

    async def list_rules(self, form_id: str, active_only: bool = True) -> list[EmailRuleRecord]:
        return [
            rule
            for rule in self._rules.values()
            if rule.form_id == form_id and (rule.is_active or not active_only)
        ]

    async def create_submission(self, form_id: str, data: Any) -> SubmissionRecord:
        submission_id = str(uuid.uuid4())
        record = SubmissionRecord(
            id=submission_id,
            form_id=form_id,
            data=copy.deepcopy(data),
            tracking_token=make_tracking_token(submission_id),
            created_at=datetime.now(timezone.utc),
        )
        self._submissions[submission_id] = record
        logger.info(f"Created submission {submission_id} for form {form_id}")
        return record

    async def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        return self._submissions.get(submission_id)

    async def update_submission(self, submission_id: str, data: Any) -> SubmissionRecord | None:
        existing = self._submissions.get(submission_id)
        if existing is None:
            return None

        updated = SubmissionRecord(
            id=existing.id,
            form_id=existing.form_id,
            data=copy.deepcopy(data),
            tracking_token=existing.tracking_token,
            created_at=existing.created_at,
        )
        self._submissions[submission_id] = updated
        return updated

    async def delete_submission(self, submission_id: str) -> bool:
        return self._submissions.pop(submission_id, None) is not None

    async def list_submissions(self, form_id: str, limit: int = 50, offset: int = 0) -> list[SubmissionRecord]:
        matching = [s for s in self._submissions.values() if s.form_id == form_id]
        matching.sort(key=lambda s: s.created_at or datetime.min.replace(tzinfo=timezone.utc), reverse=True)
        return matching[offset : offset + limit]
