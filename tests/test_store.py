import pytest

from core.exceptions import AuditNotFoundError
from db.models import ANONYMOUS_USER_ID, AuditStatus


def test_create_defaults_to_pending_anonymous(store):
    record = store.create(url="https://example.com")

    assert record.status is AuditStatus.PENDING
    assert record.user_id == ANONYMOUS_USER_ID
    assert record.url == "https://example.com"
    assert record.id


def test_update_changes_status_and_updated_at(store):
    record = store.create(url="https://example.com")

    processing = store.update(record.id, AuditStatus.PROCESSING)

    assert processing.status is AuditStatus.PROCESSING
    assert processing.updated_at >= record.updated_at
    assert processing.created_at == record.created_at


def test_rewriting_same_status_is_written(store):
    record = store.create(url="https://example.com")
    first = store.update(record.id, AuditStatus.COMPLETED)

    second = store.update(record.id, AuditStatus.COMPLETED)

    assert second.status is AuditStatus.COMPLETED
    assert second.updated_at >= first.updated_at


def test_update_unknown_id_raises(store):
    with pytest.raises(AuditNotFoundError):
        store.update("missing", AuditStatus.PROCESSING)


def test_find_by_id(store):
    record = store.create(url="https://example.com")

    assert store.find_by_id(record.id).id == record.id
    assert store.find_by_id("missing") is None


def test_find_many_newest_first(store):
    older = store.create(url="https://one.example")
    newer = store.create(url="https://two.example")

    assert [r.id for r in store.find_many()] == [newer.id, older.id]
