"""
Durable job queue for audit jobs.

Thin publisher over the Celery application: a message is durably enqueued
once the broker accepts it, and consumers may see it more than once.
"""

import logging
from typing import Optional

from celery import Celery
from kombu.exceptions import OperationalError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from api.models import AuditJobMessage
from config import Settings, require_queue_url
from core.celery import PROCESS_AUDIT_TASK

logger = logging.getLogger(__name__)


class AuditJobQueue:
    """
    Publishes {auditId} messages for the audit worker.

    Args:
        app: Celery application whose broker carries the jobs
        config: Settings used to verify the transport endpoint is configured
    """

    def __init__(self, app: Celery, config: Optional[Settings] = None):
        self.app = app
        self.config = config

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=5),
        retry=retry_if_exception_type(OperationalError),
        reraise=True,
    )
    def _publish(self, payload: dict) -> str:
        result = self.app.send_task(
            PROCESS_AUDIT_TASK,
            args=[payload],
            queue=self.app.conf.task_default_queue,
        )
        return result.id

    def submit(self, message: AuditJobMessage) -> str:
        """
        Enqueue one processing attempt for an audit.

        Retries transient broker connection errors up to 3 times.

        Returns:
            Broker task id of the enqueued job

        Raises:
            ConfigurationError: If the queue endpoint is not configured
        """
        require_queue_url(self.config)

        payload = message.model_dump(by_alias=True)
        task_id = self._publish(payload)
        logger.info(f"📨 Enqueued audit job {message.audit_id} [task {task_id}]")
        return task_id

    def close(self):
        """Release broker connections, logging instead of raising"""
        try:
            self.app.close()
            logger.info("Queue connection closed")
        except Exception as e:
            logger.warning(f"⚠️  Error closing queue connection: {str(e)}")
