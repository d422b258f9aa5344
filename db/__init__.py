# Database package - ORM models for the audit record store
from .models import Base, Audit, AuditStatus, ANONYMOUS_USER_ID

__all__ = [
    "Base",
    "Audit",
    "AuditStatus",
    "ANONYMOUS_USER_ID",
]
