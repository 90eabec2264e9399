"""SQLModel record store backed by an async SQLAlchemy session maker."""

import logging
import uuid
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from formflow.db.models import EmailRule, Form, FormSubmission
from formflow.interfaces.form_store import (
    BaseFormRepository,
    EmailRuleRecord,
    FormRecord,
    SubmissionRecord,
)
from formflow.strategies.stores.memory import make_tracking_token

logger = logging.getLogger(__name__)


def _form_record(row: Form) -> FormRecord:
    return FormRecord(id=row.id, name=row.name, sections=row.sections, fields=row.fields)


def _rule_record(row: EmailRule) -> EmailRuleRecord:
    return EmailRuleRecord(
        id=row.id,
        form_id=row.form_id,
        name=row.name,
        recipient_template=row.recipient_template,
        subject_template=row.subject_template,
        body_template=row.body_template,
        is_active=row.is_active,
    )


def _submission_record(row: FormSubmission) -> SubmissionRecord:
    return SubmissionRecord(
        id=row.id,
        form_id=row.form_id,
        data=row.data if row.data is not None else {},
        tracking_token=row.tracking_token,
        created_at=row.created_at,
    )


class SQLModelFormRepository(BaseFormRepository):
    """Record store over the `forms`, `email_rules` and `form_submissions` tables.

    Each call opens its own session so the repository can be shared by
    concurrent requests and Celery tasks.

    Example:
        ```python
        repo = SQLModelFormRepository(get_session_maker())
        form = await repo.get_form("form2_abc")
        ```
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]) -> None:
        self._session_maker = session_maker

    async def get_form(self, form_id: str) -> FormRecord | None:
        async with self._session_maker() as session:
            row = await session.get(Form, form_id)
            return _form_record(row) if row is not None else None

    async def get_rule(self, rule_id: str) -> EmailRuleRecord | None:
        async with self._session_maker() as session:
            row = await session.get(EmailRule, rule_id)
            return _rule_record(row) if row is not None else None

    async def list_rules(self, form_id: str, active_only: bool = True) -> list[EmailRuleRecord]:
        async with self._session_maker() as session:
            statement = select(EmailRule).where(EmailRule.form_id == form_id)
            if active_only:
                statement = statement.where(EmailRule.is_active == True)  # noqa: E712
            result = await session.execute(statement)
            return [_rule_record(row) for row in result.scalars().all()]

    async def create_submission(self, form_id: str, data: Any) -> SubmissionRecord:
        submission_id = str(uuid.uuid4())
        row = FormSubmission(
            id=submission_id,
            form_id=form_id,
            data=data,
            tracking_token=make_tracking_token(submission_id),
        )

        async with self._session_maker() as session:
            try:
                session.add(row)
                await session.commit()
                await session.refresh(row)
            except SQLAlchemyError as e:
                logger.error(f"Failed to create submission for form {form_id}: {e}", exc_info=True)
                await session.rollback()
                raise

        logger.info(f"Created submission {submission_id} for form {form_id}")
        return _submission_record(row)

    async def get_submission(self, submission_id: str) -> SubmissionRecord | None:
        async with self._session_maker() as session:
            row = await session.get(FormSubmission, submission_id)
            return _submission_record(row) if row is not None else None

    async def update_submission(self, submission_id: str, data: Any) -> SubmissionRecord | None:
        async with self._session_maker() as session:
            try:
                row = await session.get(FormSubmission, submission_id)
                if row is None:
                    return None
                row.data = data
                session.add(row)
                await session.commit()
                await session.refresh(row)
                return _submission_record(row)
            except SQLAlchemyError as e:
                logger.error(f"Failed to update submission {submission_id}: {e}", exc_info=True)
                await session.rollback()
                raise

    async def delete_submission(self, submission_id: str) -> bool:
        async with self._session_maker() as session:
            try:
                row = await session.get(FormSubmission, submission_id)
                if row is None:
                    return False
                await session.delete(row)
                await session.commit()
                return True
            except SQLAlchemyError as e:
                logger.error(f"Failed to delete submission {submission_id}: {e}", exc_info=True)
                await session.rollback()
                raise

    async def list_submissions(self, form_id: str, limit: int = 50, offset: int = 0) -> list[SubmissionRecord]:
        async with self._session_maker() as session:
            statement = (
                select(FormSubmission)
                .where(FormSubmission.form_id == form_id)
                .order_by(FormSubmission.created_at.desc())
                .offset(offset)
                .limit(limit)
            )
            result = await session.execute(statement)
            return [_submission_record(row) for row in result.scalars().all()]
