"""Database models using SQLModel.

Defines the persisted records of the form service:
- Form: Form definition with sections and fields stored as JSON
- EmailRule: Recipient/subject/body templates attached to a form
- FormSubmission: Raw submission payload with its tracking token
"""

import datetime
from typing import Any

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String
from sqlmodel import Field, SQLModel


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# =============================================================================
# Shared Models (for API responses, not database tables)
# =============================================================================


class FormBase(SQLModel):
    """Base form fields."""

    name: str = Field(default="", max_length=255)


class EmailRuleBase(SQLModel):
    """Base email rule fields."""

    name: str = Field(min_length=1, max_length=255)
    recipient_template: str = Field(default="")
    subject_template: str = Field(default="")
    body_template: str = Field(default="")
    is_active: bool = Field(default=True)


# =============================================================================
# Database Models
# =============================================================================


class Form(FormBase, table=True):
    """Form definition.

    `sections` and `fields` hold the raw definition as authored by the
    form builder; they are parsed into a field catalog on demand.
    """

    __tablename__ = "forms"

    id: str = Field(sa_column=Column(String(255), primary_key=True))
    sections: Any | None = Field(default=None, sa_column=Column(JSON))
    fields: Any | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True)),
    )


class EmailRule(EmailRuleBase, table=True):
    """Email rule whose templates are rendered against a form's submissions."""

    __tablename__ = "email_rules"

    id: str = Field(sa_column=Column(String(255), primary_key=True))
    form_id: str = Field(
        sa_column=Column(
            String(255),
            ForeignKey("forms.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )


class FormSubmission(SQLModel, table=True):
    """Stored form submission."""

    __tablename__ = "form_submissions"

    id: str = Field(sa_column=Column(String(64), primary_key=True))
    form_id: str = Field(
        sa_column=Column(
            String(255),
            ForeignKey("forms.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    data: Any | None = Field(default=None, sa_column=Column(JSON))
    tracking_token: str | None = Field(default=None, sa_column=Column(String(255), index=True))
    created_at: datetime.datetime = Field(
        default_factory=_utcnow,
        sa_column=Column(DateTime(timezone=True)),
    )
