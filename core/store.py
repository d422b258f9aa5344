"""
Audit record store backed by SQLAlchemy.

Each call opens its own short session so one store instance can be shared by
every job a worker process handles.
"""

import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import sessionmaker

from api.models import AuditRecord
from core.exceptions import AuditNotFoundError
from db.models import ANONYMOUS_USER_ID, Audit, AuditStatus, utcnow

logger = logging.getLogger(__name__)


class AuditRecordStore:
    """
    create / update / find_by_id / find_many over the audits table.

    Status writes are unconditional: the store does not reject a transition
    out of a terminal status, because a redelivered job legitimately starts a
    new processing attempt on an already finished audit.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def create(
        self,
        url: str,
        status: AuditStatus = AuditStatus.PENDING,
        user_id: str = ANONYMOUS_USER_ID,
    ) -> AuditRecord:
        with self.session_factory() as session:
            audit = Audit(url=url, status=status, user_id=user_id)
            session.add(audit)
            session.commit()
            session.refresh(audit)
            logger.info(f"📝 Created audit {audit.id} for {url} [{status.value}]")
            return AuditRecord.model_validate(audit)

    def update(self, audit_id: str, status: AuditStatus) -> AuditRecord:
        """
        Write a new status and bump updated_at.

        Raises:
            AuditNotFoundError: If no audit has this id
        """
        with self.session_factory() as session:
            audit = session.get(Audit, audit_id)
            if audit is None:
                raise AuditNotFoundError(audit_id)

            audit.status = status
            # Set explicitly: rewriting the same status would otherwise skip the UPDATE
            audit.updated_at = utcnow()
            session.commit()
            session.refresh(audit)
            logger.info(f"🔁 Audit {audit_id} -> {status.value}")
            return AuditRecord.model_validate(audit)

    def find_by_id(self, audit_id: str) -> Optional[AuditRecord]:
        with self.session_factory() as session:
            audit = session.get(Audit, audit_id)
            return AuditRecord.model_validate(audit) if audit else None

    def find_many(self) -> List[AuditRecord]:
        """All audits, newest first"""
        with self.session_factory() as session:
            audits = session.scalars(
                select(Audit).order_by(Audit.created_at.desc())
            ).all()
            return [AuditRecord.model_validate(a) for a in audits]
