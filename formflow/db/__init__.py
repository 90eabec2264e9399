"""Database models and session management."""

from formflow.db.models import (
    EmailRule,
    Form,
    FormSubmission,
)
from formflow.db.session import (
    AsyncSession,
    close_db,
    create_all_tables,
    get_session_maker,
    init_db,
)

__all__ = [
    # Models
    "Form",
    "EmailRule",
    "FormSubmission",
    # Session
    "AsyncSession",
    "get_session_maker",
    "create_all_tables",
    "init_db",
    "close_db",
]
