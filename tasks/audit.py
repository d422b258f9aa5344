"""
Celery queue adapter for audit jobs.

Maps the job handler's JobResult onto the broker: malformed messages are
rejected without requeue, processing failures go to Celery's retry policy.
"""

import logging

from celery import Task
from celery.exceptions import Reject

from config import settings
from core.celery import PROCESS_AUDIT_TASK, celery_app
from worker import get_worker

logger = logging.getLogger(__name__)


class AuditTask(Task):
    """
    Custom Celery task class with lifecycle logging.
    """

    def on_success(self, retval, task_id, args, kwargs):
        """Called when task succeeds"""
        logger.info(f"✅ Audit task {task_id} completed successfully")

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        """Called when task fails after its last attempt"""
        logger.error(f"❌ Audit task {task_id} failed: {str(exc)}")

    def on_retry(self, exc, task_id, args, kwargs, einfo):
        """Called when task is retried"""
        logger.warning(f"🔄 Audit task {task_id} retrying: {str(exc)}")


@celery_app.task(
    bind=True,
    base=AuditTask,
    name=PROCESS_AUDIT_TASK,
    max_retries=settings.TASK_MAX_RETRIES,
    default_retry_delay=settings.TASK_DEFAULT_RETRY_DELAY,
    acks_late=True,
)
def process_audit(self, message) -> dict:
    """
    Process one {auditId} message.

    Returns:
        AuditOutcome in camelCase JSON form (scrape result and scores)

    Raises:
        Reject: Message is malformed (not requeued, processor not invoked)
        Exception: The processing error, raised through Task.retry
    """
    attempt = self.request.retries + 1
    logger.info(f"🚀 Audit job attempt {attempt}/{self.max_retries + 1}: {message}")

    result = get_worker().handle(message)
    if result.ok:
        return result.value

    error = result.error
    if not error.retryable:
        raise Reject(str(error.exception), requeue=False)

    raise self.retry(exc=error.exception, countdown=settings.TASK_DEFAULT_RETRY_DELAY)
