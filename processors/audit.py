"""
Audit processor: drives one audit through PROCESSING to COMPLETED or FAILED.

There is no idempotency guard. A redelivered job for an audit that already
finished runs both engines again (new screenshot, new scores) and rewrites
the terminal status; results only become visible when the record is read.
"""

import asyncio
import logging
import time

from api.models import AuditOutcome
from core.results import FailureRecording
from db.models import AuditStatus

logger = logging.getLogger(__name__)


def run_coroutine(coro):
    """
    Run a coroutine to completion on a fresh event loop (Celery tasks are sync).

    If run_until_complete is interrupted from outside the loop (Celery's
    SoftTimeLimitExceeded is raised from a signal handler), the tasks still
    pending are cancelled and awaited so their browser sessions are released
    before the loop closes.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        try:
            _cancel_pending_tasks(loop)
            loop.run_until_complete(loop.shutdown_asyncgens())
        finally:
            asyncio.set_event_loop(None)
            loop.close()


def _cancel_pending_tasks(loop):
    pending = asyncio.all_tasks(loop)
    if not pending:
        return

    logger.warning(f"🧹 Cancelling {len(pending)} unfinished engine task(s)")
    for task in pending:
        task.cancel()
    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))


class AuditProcessor:
    """
    Args:
        store: AuditRecordStore (update / find_by_id)
        scraper: WebsiteScraper
        audit_engine: PageAuditEngine
    """

    def __init__(self, store, scraper, audit_engine):
        self.store = store
        self.scraper = scraper
        self.audit_engine = audit_engine

    def process(self, audit_id: str) -> AuditOutcome:
        """
        Steps:
        1. Update audit -> PROCESSING (errors propagate, nothing else runs)
        2. Scrape and score the audit URL
        3. Update audit -> COMPLETED
        4. On error in 2 or 3: try to update audit -> FAILED, then re-raise
           the original error
        """
        start = time.time()

        record = self.store.update(audit_id, AuditStatus.PROCESSING)

        try:
            outcome = run_coroutine(self._run_engines(audit_id, record.url))
            self.store.update(audit_id, AuditStatus.COMPLETED)
        except Exception as error:
            recording = self.record_failure(audit_id, error)
            if not recording.updated:
                logger.error(
                    f"⚠️  Audit {audit_id} may remain PROCESSING: "
                    f"FAILED could not be recorded ({recording.log_error})"
                )
            raise

        logger.info(f"✅ Audit {audit_id} completed in {time.time() - start:.2f}s")
        return outcome

    def record_failure(self, audit_id: str, error: BaseException) -> FailureRecording:
        """
        Write FAILED after a processing error.

        A failure of this write is logged and returned, never raised, so it
        cannot mask the processing error.
        """
        logger.error(f"❌ Audit {audit_id} failed: {str(error)}")
        try:
            self.store.update(audit_id, AuditStatus.FAILED)
        except Exception as update_error:
            logger.error(f"Failed to update audit {audit_id} to FAILED: {str(update_error)}")
            return FailureRecording(updated=False, log_error=update_error)
        return FailureRecording(updated=True)

    async def _run_engines(self, audit_id: str, url: str) -> AuditOutcome:
        # The engines are independent; run them side by side and stop the other on first failure
        scrape_task = asyncio.ensure_future(self.scraper.scrape(url))
        audit_task = asyncio.ensure_future(self.audit_engine.audit(url))
        try:
            scrape, scores = await asyncio.gather(scrape_task, audit_task)
        except BaseException:
            for task in (scrape_task, audit_task):
                task.cancel()
            await asyncio.gather(scrape_task, audit_task, return_exceptions=True)
            raise

        return AuditOutcome(audit_id=audit_id, scrape=scrape, scores=scores)
