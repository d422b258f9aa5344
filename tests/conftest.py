"""
Test configuration and fixtures for the audit pipeline.

Every test gets its own in-memory SQLite record store; engines are replaced
by in-process fakes so no browser or Lighthouse binary is required.
"""

from typing import List, Optional, Tuple

import pytest

from api.models import (
    AuditScore,
    CallToAction,
    FormSummary,
    Heading,
    NavigationSummary,
    PageMetadata,
    ScrapeResult,
)
from core.database import create_db_engine, create_session_factory
from core.exceptions import ScrapeError
from core.store import AuditRecordStore
from db.models import AuditStatus
from processors.audit import AuditProcessor


class RecordingStore(AuditRecordStore):
    """Record store that remembers every status write, optionally failing some"""

    def __init__(self, session_factory, fail_on: Optional[set] = None):
        super().__init__(session_factory)
        self.transitions: List[Tuple[str, AuditStatus]] = []
        self.fail_on = fail_on or set()

    def update(self, audit_id, status):
        if status in self.fail_on:
            raise RuntimeError(f"database unavailable while writing {status.value}")
        record = super().update(audit_id, status)
        self.transitions.append((audit_id, status))
        return record

    def statuses_for(self, audit_id) -> List[AuditStatus]:
        return [status for recorded_id, status in self.transitions if recorded_id == audit_id]


def make_scrape_result(screenshot_path: str = "screenshots/screenshot-1.png") -> ScrapeResult:
    return ScrapeResult(
        metadata=PageMetadata(title="Example Domain", description=None),
        headings=[Heading(tag="H1", text="Example Domain")],
        ctas=[CallToAction(text="More information", is_above_the_fold=True)],
        forms=[FormSummary(input_count=2)],
        navigation=NavigationSummary(link_count=0),
        screenshot_path=screenshot_path,
    )


class FakeScraper:
    def __init__(self, fail_for: Optional[set] = None):
        self.fail_for = fail_for or set()
        self.calls: List[str] = []

    async def scrape(self, url):
        self.calls.append(url)
        if url in self.fail_for:
            raise ScrapeError(url, TimeoutError("Timeout 30000ms exceeded."), stage="Navigation failed")
        return make_scrape_result(f"screenshots/screenshot-{len(self.calls)}.png")


class FakeAuditEngine:
    def __init__(self, scores: Optional[AuditScore] = None):
        self.scores = scores or AuditScore(performance=91, accessibility=86, seo=100)
        self.calls: List[str] = []

    async def audit(self, url):
        self.calls.append(url)
        return self.scores


class FakeQueue:
    def __init__(self):
        self.messages = []
        self.closed = False

    def submit(self, message):
        self.messages.append(message)
        return f"task-{len(self.messages)}"

    def close(self):
        self.closed = True


@pytest.fixture
def db_engine():
    engine = create_db_engine("sqlite://", create_tables=True)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return create_session_factory(db_engine)


@pytest.fixture
def store(session_factory):
    return RecordingStore(session_factory)


@pytest.fixture
def scraper():
    return FakeScraper()


@pytest.fixture
def audit_engine():
    return FakeAuditEngine()


@pytest.fixture
def processor(store, scraper, audit_engine):
    return AuditProcessor(store=store, scraper=scraper, audit_engine=audit_engine)


@pytest.fixture
def fake_queue():
    return FakeQueue()
