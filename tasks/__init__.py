# Tasks package - Celery background tasks
from .audit import process_audit, AuditTask

__all__ = [
    "process_audit",
    "AuditTask",
]
