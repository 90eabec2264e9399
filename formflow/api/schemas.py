"""API request and response schemas.

Pydantic v2 models for API serialization/deserialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from formflow.interfaces.form_store import SubmissionRecord


# =============================================================================
# Rendering Schemas
# =============================================================================


class RenderRequest(BaseModel):
    """Request schema for rendering templates against a submission payload."""

    templates: list[str] = Field(min_length=1, description="Templates containing {{variable}} tokens")
    payload: dict[str, Any] | list[Any] | None = Field(
        default=None,
        description="Submission payload: flat mapping or list of {id, value} items",
    )


class RenderResponse(BaseModel):
    """Response schema for rendered templates, in request order."""

    form_id: str
    rendered: list[str]
    variables: list[str] = Field(description="Distinct variable names found across the templates")


class VariableResolveRequest(BaseModel):
    """Request schema for resolving a single variable."""

    payload: dict[str, Any] | list[Any] | None = None


class VariableResolveResponse(BaseModel):
    """Response schema for a single variable resolution."""

    form_id: str
    variable: str
    found: bool
    value: Any = None
    strategy: str | None = Field(default=None, description="Name of the strategy that produced the value")


# =============================================================================
# Mapping Schemas
# =============================================================================


class MappingRequest(BaseModel):
    """Request schema for building the mapped view of a submission."""

    payload: dict[str, Any] | list[Any] = Field(description="Submission payload")


class MappingResponse(BaseModel):
    """Response schema for the mapped view of a submission."""

    form_id: str
    mapped: dict[str, Any]


class AliasResponse(BaseModel):
    """Response schema for the best alias of one field."""

    form_id: str
    field_id: str
    alias: str


# =============================================================================
# Submission Schemas
# =============================================================================


class SubmissionCreate(BaseModel):
    """Request schema for storing a submission."""

    data: dict[str, Any] | list[Any] = Field(description="Raw submission payload")


class SubmissionUpdate(BaseModel):
    """Request schema for replacing a submission's data."""

    data: dict[str, Any] | list[Any]


class SubmissionResponse(BaseModel):
    """Response schema for a stored submission."""

    id: str
    form_id: str
    data: Any
    tracking_token: str | None = None
    created_at: datetime | None = None
    task_id: str | None = Field(default=None, description="Celery task rendering the form's email rules")

    @classmethod
    def from_record(cls, record: SubmissionRecord, task_id: str | None = None) -> "SubmissionResponse":
        return cls(
            id=record.id,
            form_id=record.form_id,
            data=record.data,
            tracking_token=record.tracking_token,
            created_at=record.created_at,
            task_id=task_id,
        )


class SubmissionListResponse(BaseModel):
    """Response for listing submissions."""

    submissions: list[SubmissionResponse]
    limit: int
    offset: int


# =============================================================================
# Email Rule Schemas
# =============================================================================


class RulePreviewRequest(BaseModel):
    """Request schema for previewing an email rule.

    Exactly one of `submission_id` or `payload` is normally given; a stored
    submission wins when both are present.
    """

    submission_id: str | None = None
    payload: dict[str, Any] | list[Any] | None = None


class RenderedRule(BaseModel):
    """An email rule with its templates rendered."""

    rule_id: str
    name: str
    recipient: str
    subject: str
    body: str


# =============================================================================
# Error Schemas
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str = Field(description="Error message")
    error_code: str | None = Field(default=None, description="Application-specific error code")
    extra: dict[str, Any] | None = Field(default=None, description="Additional error context")
