"""Abstract base classes for the record store and resolution strategies."""

from formflow.interfaces.form_store import (
    BaseFormRepository,
    EmailRuleRecord,
    FormRecord,
    SubmissionRecord,
)
from formflow.interfaces.resolution import (
    BaseResolutionStrategy,
    ResolutionRequest,
    ResolutionResult,
)

__all__ = [
    "BaseFormRepository",
    "FormRecord",
    "EmailRuleRecord",
    "SubmissionRecord",
    "BaseResolutionStrategy",
    "ResolutionRequest",
    "ResolutionResult",
]
