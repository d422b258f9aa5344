import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Index, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Placeholder owner for audits submitted without an account
ANONYMOUS_USER_ID = "anonymous"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditStatus(str, enum.Enum):
    """Audit status state machine: PENDING -> PROCESSING -> COMPLETED | FAILED"""
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Audit(Base):
    """
    One evaluation run of a URL.

    There is no failure-reason column: a FAILED audit only records its
    status. Adding one is a change to the storage contract, not something
    the worker writes on its own.
    """

    __tablename__ = "audits"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, default=ANONYMOUS_USER_ID, index=True)
    url = Column(String, nullable=False)
    status = Column(
        Enum(AuditStatus, name="audit_status"),
        nullable=False,
        default=AuditStatus.PENDING,
        index=True,
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index("idx_audits_created_at", "created_at"),
    )

    def __repr__(self):
        return f"<Audit {self.id} status={self.status.value if self.status else None}>"
