# Processors package - audit status state machine
from .audit import AuditProcessor

__all__ = ["AuditProcessor"]
