"""
Audit worker - job handler and process entrypoint

Start with:
    python run_worker.py   (or the site-audit-worker console script)
or:
    celery -A core.celery worker -Q audit --concurrency 2 --prefetch-multiplier 1

Each worker process builds its own record store connection pool and engines
on first use (after the prefork fork). SIGTERM/SIGINT trigger Celery's warm
shutdown: no new jobs are consumed, connections are closed by the shutdown
handlers, and any job that was not acknowledged is redelivered by the broker.
"""

import logging
from typing import Any, Optional

from celery.signals import worker_process_shutdown, worker_shutdown
from pydantic import ValidationError
from sqlalchemy.engine import Engine

from analyzer.lighthouse import PageAuditEngine
from api.models import AuditJobMessage
from config import Settings, require_database_url, require_queue_url, settings
from core.celery import celery_app
from core.database import create_db_engine, create_session_factory, dispose_engine
from core.exceptions import InvalidJobMessageError
from core.logging_config import setup_logging
from core.queue import AuditJobQueue
from core.results import JobErrorKind, JobResult
from core.store import AuditRecordStore
from processors.audit import AuditProcessor
from scraper.website import WebsiteScraper

logger = logging.getLogger(__name__)


class AuditWorker:
    """
    Turns one queue message into one AuditProcessor call.

    handle() never raises for a per-job problem; it returns a JobResult and
    the queue adapter decides between reject and retry.
    """

    def __init__(
        self,
        processor: AuditProcessor,
        queue: Optional[AuditJobQueue] = None,
        engine: Optional[Engine] = None,
    ):
        self.processor = processor
        self.queue = queue
        self.engine = engine

    def handle(self, payload: Any) -> JobResult:
        try:
            message = AuditJobMessage.model_validate(payload)
        except ValidationError as e:
            error = InvalidJobMessageError(
                f"Invalid job data: auditId is required and must be a string ({e.error_count()} errors)"
            )
            logger.error(f"🚫 Rejecting job: {str(error)}")
            return JobResult.failure(JobErrorKind.INVALID_MESSAGE, error)

        try:
            outcome = self.processor.process(message.audit_id)
        except Exception as e:
            logger.error(f"❌ Audit job {message.audit_id} failed: {str(e)}")
            return JobResult.failure(JobErrorKind.PROCESSING_FAILED, e)

        return JobResult.success(outcome.model_dump(by_alias=True, mode="json"))

    def close(self):
        """Close the queue connection and the record store pool"""
        if self.queue is not None:
            self.queue.close()
        dispose_engine(self.engine)


def build_worker(config: Optional[Settings] = None) -> AuditWorker:
    """
    Construct the worker and its collaborators from settings.

    Raises:
        ConfigurationError: If the queue or datastore endpoint is missing
    """
    config = config or settings
    require_queue_url(config)
    engine = create_db_engine(
        require_database_url(config), create_tables=config.DATABASE_CREATE_TABLES
    )
    store = AuditRecordStore(create_session_factory(engine))

    processor = AuditProcessor(
        store=store,
        scraper=WebsiteScraper(),
        audit_engine=PageAuditEngine(),
    )
    return AuditWorker(processor, queue=AuditJobQueue(celery_app, config), engine=engine)


# Per-process worker instance
_worker: Optional[AuditWorker] = None


def get_worker() -> AuditWorker:
    global _worker

    if _worker is None:
        _worker = build_worker()

    return _worker


def set_worker(worker: Optional[AuditWorker]):
    """Install a pre-built worker (embedding and tests)"""
    global _worker
    _worker = worker


def close_worker():
    global _worker

    if _worker is not None:
        _worker.close()
        _worker = None


@worker_process_shutdown.connect
def worker_process_shutdown_handler(**kwargs):
    close_worker()


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    """Called when worker shuts down"""
    logger.info("🛑 Audit worker is shutting down, closing connections")
    close_worker()


def main():
    setup_logging(settings.LOG_LEVEL)

    # Missing endpoints are fatal at startup, not per job
    require_queue_url()
    require_database_url()

    logger.info("🚀 Starting audit worker...")
    celery_app.worker_main(
        [
            "worker",
            f"--loglevel={settings.LOG_LEVEL}",
            f"--concurrency={settings.WORKER_CONCURRENCY}",
            f"--prefetch-multiplier={settings.WORKER_PREFETCH_MULTIPLIER}",
            "-Q",
            settings.AUDIT_QUEUE_NAME,
        ]
    )
