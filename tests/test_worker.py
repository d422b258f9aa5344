"""
Tests for the job handler, the Celery task adapter and the full
submit -> consume -> process flow against in-process fakes.
"""

import runpy
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from celery.exceptions import Reject, Retry

import worker as worker_module
from config import settings
from core.exceptions import InvalidJobMessageError, ScrapeError
from core.results import JobErrorKind
from db.models import AuditStatus
from processors.audit import AuditProcessor
from services.audit_service import AuditService
from tasks.audit import process_audit
from tests.conftest import FakeAuditEngine, FakeScraper
from worker import AuditWorker, get_worker, set_worker, worker_shutdown_handler


class SpyProcessor:
    def __init__(self):
        self.calls = []

    def process(self, audit_id):
        self.calls.append(audit_id)
        raise AssertionError("processor must not run for an invalid message")


@pytest.fixture
def installed_worker(processor):
    worker = AuditWorker(processor)
    set_worker(worker)
    yield worker
    set_worker(None)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"auditId": ""},
        {"auditId": "   "},
        {"auditId": 42},
        {"auditId": None},
        "not-a-dict",
        None,
    ],
)
def test_invalid_message_is_rejected_without_processing(payload):
    spy = SpyProcessor()
    worker = AuditWorker(spy)

    result = worker.handle(payload)

    assert not result.ok
    assert result.error.kind is JobErrorKind.INVALID_MESSAGE
    assert result.error.retryable is False
    assert isinstance(result.error.exception, InvalidJobMessageError)
    assert "auditId is required" in str(result.error.exception)
    assert spy.calls == []


def test_successful_job_returns_camel_case_outcome(store, processor):
    record = store.create(url="https://example.com")

    result = AuditWorker(processor).handle({"auditId": record.id})

    assert result.ok
    assert result.value["auditId"] == record.id
    assert result.value["scores"] == {"performance": 91, "accessibility": 86, "seo": 100}
    assert result.value["scrape"]["ctas"][0]["isAboveTheFold"] is True
    assert result.value["scrape"]["screenshotPath"].startswith("screenshots/")


def test_processing_failure_is_retryable(store, audit_engine):
    record = store.create(url="https://example.com")
    processor = AuditProcessor(
        store=store, scraper=FakeScraper(fail_for={record.url}), audit_engine=audit_engine
    )

    result = AuditWorker(processor).handle({"auditId": record.id})

    assert result.error.kind is JobErrorKind.PROCESSING_FAILED
    assert result.error.retryable is True
    assert isinstance(result.error.exception, ScrapeError)


def test_unknown_audit_id_is_a_processing_failure(processor):
    result = AuditWorker(processor).handle({"auditId": "does-not-exist"})

    assert result.error.kind is JobErrorKind.PROCESSING_FAILED


def test_task_rejects_invalid_message(installed_worker):
    with pytest.raises(Reject) as excinfo:
        process_audit({"auditId": ""})

    assert excinfo.value.requeue is False


def test_task_raises_processing_error_for_retry(installed_worker, store, scraper):
    record = store.create(url="https://example.com")
    scraper.fail_for.add(record.url)

    # Called directly, Task.retry re-raises the original error
    with pytest.raises(ScrapeError):
        process_audit({"auditId": record.id})

    assert store.find_by_id(record.id).status is AuditStatus.FAILED


def test_task_returns_outcome(installed_worker, store):
    record = store.create(url="https://example.com")

    value = process_audit({"auditId": record.id})

    assert value["auditId"] == record.id
    assert store.find_by_id(record.id).status is AuditStatus.COMPLETED


def test_submitted_audit_flows_to_completed(store, processor, fake_queue):
    service = AuditService(store, fake_queue)
    worker = AuditWorker(processor)

    audit = service.create_audit("https://example.com")

    assert audit.status is AuditStatus.PENDING
    assert len(fake_queue.messages) == 1
    payload = fake_queue.messages[0].model_dump(by_alias=True)
    assert payload == {"auditId": audit.id}

    result = worker.handle(payload)

    assert result.ok
    assert store.statuses_for(audit.id) == [AuditStatus.PROCESSING, AuditStatus.COMPLETED]
    assert service.get_audit(audit.id).status is AuditStatus.COMPLETED


def test_failed_job_does_not_block_the_next(store, fake_queue):
    scraper = FakeScraper(fail_for={"https://unreachable.invalid"})
    worker = AuditWorker(AuditProcessor(store=store, scraper=scraper, audit_engine=FakeAuditEngine()))
    service = AuditService(store, fake_queue)

    failing = service.create_audit("https://unreachable.invalid")
    healthy = service.create_audit("https://example.com")

    results = [worker.handle(m.model_dump(by_alias=True)) for m in fake_queue.messages]

    assert not results[0].ok
    assert "Navigation failed" in str(results[0].error.exception)
    assert results[1].ok
    assert store.find_by_id(failing.id).status is AuditStatus.FAILED
    assert store.find_by_id(healthy.id).status is AuditStatus.COMPLETED


def test_task_retries_after_configured_delay(installed_worker, store, scraper, monkeypatch):
    scheduled = []

    def record_retry(exc=None, countdown=None, **kwargs):
        scheduled.append((exc, countdown))
        return Retry("Retry scheduled", exc)

    monkeypatch.setattr(process_audit, "retry", record_retry)
    record = store.create(url="https://example.com")
    scraper.fail_for.add(record.url)

    with pytest.raises(Retry):
        process_audit({"auditId": record.id})

    assert process_audit.default_retry_delay == settings.TASK_DEFAULT_RETRY_DELAY
    assert isinstance(scheduled[0][0], ScrapeError)
    assert scheduled[0][1] == settings.TASK_DEFAULT_RETRY_DELAY


def test_shutdown_closes_connections_and_resets_worker(processor, fake_queue, monkeypatch):
    engine = MagicMock()
    set_worker(AuditWorker(processor, queue=fake_queue, engine=engine))

    worker_shutdown_handler()

    assert fake_queue.closed is True
    engine.dispose.assert_called_once()

    # The next job in this process builds a fresh worker
    rebuilt = AuditWorker(processor)
    monkeypatch.setattr(worker_module, "build_worker", lambda config=None: rebuilt)
    try:
        assert get_worker() is rebuilt
    finally:
        set_worker(None)


def test_launcher_runs_the_imported_worker_module(monkeypatch):
    calls = []
    monkeypatch.setattr(worker_module, "main", lambda: calls.append("main"))

    runpy.run_path(str(Path(__file__).parent.parent / "run_worker.py"), run_name="__main__")

    assert calls == ["main"]
    # The shutdown handlers live in the single `worker` module
    assert sys.modules["worker"] is worker_module
