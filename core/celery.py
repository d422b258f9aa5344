"""
Celery application configuration for the Site Audit worker
Handles background audit processing with Redis as broker
"""

import logging
from typing import Optional

from celery import Celery
from celery.signals import (
    task_failure,
    task_postrun,
    task_prerun,
    task_retry,
    worker_ready,
)
from kombu import Queue

from config import Settings, settings as default_settings

logger = logging.getLogger(__name__)

PROCESS_AUDIT_TASK = "audit.process"


def create_celery_app(config: Optional[Settings] = None) -> Celery:
    """
    Create and configure the Celery application.

    Delivery is at-least-once: tasks are acknowledged only after they finish
    and are requeued when the worker process running them dies.
    """
    config = config or default_settings

    app = Celery(
        "site_audit",
        broker=config.celery_broker,
        backend=config.celery_backend,
        include=["tasks.audit"],
    )

    app.conf.update(
        # Task Settings
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        # Task Execution
        task_acks_late=True,  # Acknowledge task after completion (ensures no lost tasks)
        task_reject_on_worker_lost=True,  # Re-queue if worker crashes
        task_track_started=True,
        # Task Time Limits
        task_time_limit=config.TASK_TIME_LIMIT,
        task_soft_time_limit=config.TASK_SOFT_TIME_LIMIT,
        # Result Backend Settings
        result_expires=config.CELERY_RESULT_EXPIRES,
        result_extended=True,
        # Worker Settings
        worker_concurrency=config.WORKER_CONCURRENCY,  # Bounds simultaneous browser processes
        worker_prefetch_multiplier=config.WORKER_PREFETCH_MULTIPLIER,
        worker_max_tasks_per_child=config.WORKER_MAX_TASKS_PER_CHILD,
        # Queue Configuration
        task_default_queue=config.AUDIT_QUEUE_NAME,
        task_queues=(Queue(config.AUDIT_QUEUE_NAME, routing_key="audit.#"),),
        task_routes={PROCESS_AUDIT_TASK: {"queue": config.AUDIT_QUEUE_NAME}},
        # Monitoring
        worker_send_task_events=True,
        task_send_sent_event=True,
        # Connection
        broker_connection_retry_on_startup=True,
        broker_connection_retry=True,
        broker_connection_max_retries=10,
    )

    return app


# Global Celery app instance
celery_app = create_celery_app()


# Job lifecycle logging

@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    """Worker has connected to the broker"""
    logger.info("🚀 Audit worker is ready and waiting for jobs")


@task_prerun.connect
def task_prerun_handler(sender=None, task_id=None, task=None, args=None, **kwargs):
    logger.info(f"⏳ Starting job: {task.name} [ID: {task_id}]")


@task_postrun.connect
def task_postrun_handler(
    sender=None, task_id=None, task=None, retval=None, state=None, **kwargs
):
    logger.info(f"✅ Finished job: {task.name} [ID: {task_id}] [State: {state}]")


@task_failure.connect
def task_failure_handler(
    sender=None, task_id=None, exception=None, traceback=None, **kwargs
):
    """Fires when a job raises past its last retry"""
    logger.error(
        f"❌ Job failed: {sender.name} [ID: {task_id}] [Error: {str(exception)}]"
    )


@task_retry.connect
def task_retry_handler(sender=None, request=None, reason=None, **kwargs):
    """Called when task is retried"""
    task_id = request.id if request is not None else None
    logger.warning(
        f"🔄 Retrying job: {sender.name} [ID: {task_id}] [Reason: {reason}]"
    )
