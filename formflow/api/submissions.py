"""Submission and email rule API routes.

Handles CRUD operations for form submissions and previews of email
rules rendered against a stored or ad-hoc payload.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from formflow.api.deps import get_engine, get_repository
from formflow.api.schemas import (
    RenderedRule,
    RulePreviewRequest,
    SubmissionCreate,
    SubmissionListResponse,
    SubmissionResponse,
    SubmissionUpdate,
)
from formflow.interfaces.form_store import BaseFormRepository
from formflow.strategies.field_resolution import FieldResolutionEngine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["submissions"])


@router.post(
    "/forms/{form_id}/submissions",
    response_model=SubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_submission(
    form_id: str,
    submission: SubmissionCreate,
    dispatch_rules: bool = Query(default=False, description="Queue rendering of the form's email rules"),
    repository: BaseFormRepository = Depends(get_repository),
) -> SubmissionResponse:
    """Store a submission and optionally queue its email rules.

    Raises:
        HTTPException: If the form does not exist or the store fails.
    """
    form = await repository.get_form(form_id)
    if form is None:
        logger.warning(f"Submission for unknown form: {form_id}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Form {form_id} not found",
        )

    try:
        record = await repository.create_submission(form_id, submission.data)
    except Exception as e:
        logger.error(f"Error storing submission for form {form_id}: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error storing submission",
        ) from e

    task_id = None
    if dispatch_rules:
        try:
            from formflow.worker import render_submission_rules_task

            task = render_submission_rules_task.delay(record.id)
            task_id = task.id
            logger.info(f"Queued rule rendering for submission {record.id}, task: {task_id}")
        except Exception as e:
            # The submission is stored; rules can be rendered later
            logger.error(f"Failed to queue Celery task: {e}", exc_info=True)

    return SubmissionResponse.from_record(record, task_id=task_id)


@router.get("/forms/{form_id}/submissions", response_model=SubmissionListResponse)
async def list_submissions(
    form_id: str,
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    repository: BaseFormRepository = Depends(get_repository),
) -> SubmissionListResponse:
    """List a form's submissions, newest first."""
    records = await repository.list_submissions(form_id, limit=limit, offset=offset)
    return SubmissionListResponse(
        submissions=[SubmissionResponse.from_record(r) for r in records],
        limit=limit,
        offset=offset,
    )


@router.get("/submissions/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: str,
    repository: BaseFormRepository = Depends(get_repository),
) -> SubmissionResponse:
    record = await repository.get_submission(submission_id)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Submission {submission_id} not found",
        )
    return SubmissionResponse.from_record(record)


@router.put("/submissions/{submission_id}", response_model=SubmissionResponse)
async def update_submission(
    submission_id: str,
    update: SubmissionUpdate,
    repository: BaseFormRepository = Depends(get_repository),
) -> SubmissionResponse:
    """Replace a submission's data. The id and tracking token are kept."""
    record = await repository.update_submission(submission_id, update.data)
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Submission {submission_id} not found",
        )
    logger.info(f"Updated submission {submission_id}")
    return SubmissionResponse.from_record(record)


@router.delete("/submissions/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
    submission_id: str,
    repository: BaseFormRepository = Depends(get_repository),
) -> None:
    deleted = await repository.delete_submission(submission_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Submission {submission_id} not found",
        )
    logger.info(f"Deleted submission {submission_id}")


@router.post("/rules/{rule_id}/preview", response_model=RenderedRule)
async def preview_rule(
    rule_id: str,
    request: RulePreviewRequest,
    repository: BaseFormRepository = Depends(get_repository),
    engine: FieldResolutionEngine = Depends(get_engine),
) -> RenderedRule:
    """Render an email rule against a stored submission or an ad-hoc payload.

    Raises:
        HTTPException: If the rule or the referenced submission does not exist.
    """
    rule = await repository.get_rule(rule_id)
    if rule is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Rule {rule_id} not found",
        )

    payload = request.payload
    if request.submission_id is not None:
        submission = await repository.get_submission(request.submission_id)
        if submission is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Submission {request.submission_id} not found",
            )
        payload = submission.payload()

    rendered = await engine.render_rule(rule, payload)
    return RenderedRule(rule_id=rule.id, name=rule.name, **rendered)
