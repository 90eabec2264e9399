"""Shared fixtures for the FormFlow test suite."""

import pytest

from formflow.core.cache import TTLCache
from formflow.core.events import EventLogger
from formflow.interfaces.form_store import EmailRuleRecord, FormRecord
from formflow.strategies.stores.memory import InMemoryFormRepository


class RecordingEventLogger(EventLogger):
    """Event logger that keeps (level, event, fields) tuples instead of logging."""

    def __init__(self, category: str = "test") -> None:
        super().__init__(category=category, logger=object())
        self.records: list[tuple[str, str, dict]] = []

    def emit(self, level, event, **fields):
        self.records.append((level, event, fields))

    def names(self) -> list[str]:
        return [event for _, event, _ in self.records]

    def of(self, event: str) -> list[dict]:
        return [fields for _, name, fields in self.records if name == event]


CONTACT_FORM_ID = "form2_contact"

CONTACT_FORM_SECTIONS = [
    {
        "id": "s1",
        "fields": [
            {"id": "f1", "type": "email", "label": "Your Email", "stableId": "item_email"},
            {"id": "f2", "type": "text", "label": "First Name", "stableId": "item_first"},
            {"id": "f3", "type": "text", "label": "Last Name"},
        ],
    },
    {
        "id": "s2",
        "fields": [
            {"id": "f4", "type": "tel", "label": "Phone"},
            {"id": "f5", "type": "select", "label": "Budget Range", "mapping": "budget"},
        ],
    },
]


@pytest.fixture
def events():
    return RecordingEventLogger()


@pytest.fixture
def contact_form():
    return FormRecord(id=CONTACT_FORM_ID, name="Contact", sections=CONTACT_FORM_SECTIONS)


@pytest.fixture
def repository(contact_form):
    repo = InMemoryFormRepository(forms=[contact_form])
    repo.add_rule(
        EmailRuleRecord(
            id="rule1",
            form_id=CONTACT_FORM_ID,
            name="Welcome",
            recipient_template="{{item_email}}",
            subject_template="Hello {{firstName}}",
            body_template="Budget: {{budget}}. Ref {{trackingToken}}",
        )
    )
    return repo


@pytest.fixture
def cache():
    return TTLCache(ttl_seconds=300)
