"""Celery worker entry point.

Background worker that renders a form's email rules against a stored
submission. Uses a fresh event loop to run the async engine within
Celery workers.
"""

import asyncio
import logging

from celery import Celery, shared_task
from celery.signals import worker_ready

from formflow.core.config import Settings, get_settings
from formflow.core.factory import ComponentFactory

logger = logging.getLogger(__name__)

# Initialize Celery app
settings: Settings = get_settings()

celery_app = Celery(
    "formflow_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["formflow.worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,
    task_soft_time_limit=270,
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=200,
)


@worker_ready.connect
def on_worker_ready(**kwargs):
    """Log when worker is ready."""
    logger.info("Celery worker is ready and listening for tasks")


def run_async(coro):
    """Run an async coroutine in a new event loop.

    Celery workers don't have a running event loop, so we need
    to create one for async operations.

    Args:
        coro: The async coroutine to run.

    Returns:
        The result of the coroutine.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@shared_task(bind=True, name="formflow.worker.render_submission_rules")
def render_submission_rules_task(self, submission_id: str) -> dict:
    """Render every active email rule of a submission's form.

    Args:
        self: Celery task instance (for bind=True).
        submission_id: The stored submission to render against.

    Returns:
        Dict with the rendered recipient/subject/body per rule.
    """
    try:
        logger.info(f"Rendering email rules for submission: {submission_id}")
        return run_async(render_submission_rules(submission_id))
    except Exception as e:
        logger.exception(f"Fatal error in render_submission_rules_task for {submission_id}: {e}")
        return {
            "status": "failed",
            "submission_id": submission_id,
            "error": f"Fatal error: {str(e)}",
        }


async def render_submission_rules(submission_id: str, factory: ComponentFactory | None = None) -> dict:
    """Async implementation of rule rendering.

    Args:
        submission_id: The stored submission to render against.
        factory: Component factory. A new one built from settings if None,
            since each task runs in its own event loop.

    Returns:
        Dict with status and rendered rules.
    """
    factory = factory or ComponentFactory(get_settings())
    repository = factory.get_form_repository()
    engine = factory.get_engine()

    submission = await repository.get_submission(submission_id)
    if submission is None:
        logger.warning(f"Submission not found: {submission_id}")
        return {
            "status": "failed",
            "submission_id": submission_id,
            "error": "Submission not found",
        }

    rules = await repository.list_rules(submission.form_id)
    payload = submission.payload()

    rendered = []
    for rule in rules:
        result = await engine.render_rule(rule, payload)
        rendered.append({"rule_id": rule.id, "name": rule.name, **result})
        logger.info(f"Rendered rule {rule.id} for submission {submission_id}")

    return {
        "status": "completed",
        "submission_id": submission_id,
        "form_id": submission.form_id,
        "rules": rendered,
    }
