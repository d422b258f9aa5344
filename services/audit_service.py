import logging
from typing import List, Optional

from pydantic import AnyUrl, TypeAdapter, ValidationError

from api.models import AuditJobMessage, AuditRecord
from core.exceptions import InvalidAuditRequestError
from db.models import AuditStatus

logger = logging.getLogger(__name__)

_url_adapter = TypeAdapter(AnyUrl)


class AuditService:
    """
    Intake for audits: persist a PENDING record, then enqueue its job.

    If the enqueue fails the record stays PENDING and the error propagates
    to the caller.
    """

    def __init__(self, store, queue):
        self.store = store
        self.queue = queue

    def create_audit(self, url) -> AuditRecord:
        if not isinstance(url, str) or not url.strip():
            raise InvalidAuditRequestError("URL is required and must be a non-empty string")

        url = url.strip()
        try:
            _url_adapter.validate_python(url)
        except ValidationError:
            raise InvalidAuditRequestError("Invalid URL format")

        audit = self.store.create(url=url, status=AuditStatus.PENDING)
        self.queue.submit(AuditJobMessage(audit_id=audit.id))
        return audit

    def get_audits(self) -> List[AuditRecord]:
        return self.store.find_many()

    def get_audit(self, audit_id: str) -> Optional[AuditRecord]:
        return self.store.find_by_id(audit_id)
