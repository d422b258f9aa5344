# API package - domain models and the intake router
# The router is imported from api.routes directly; it pulls in the queue and store.
from .models import (
    AuditJobMessage,
    PageMetadata,
    Heading,
    CallToAction,
    FormSummary,
    NavigationSummary,
    ScrapeResult,
    AuditScore,
    AuditOutcome,
    CreateAuditRequest,
    AuditRecord,
)

__all__ = [
    "AuditJobMessage",
    "PageMetadata",
    "Heading",
    "CallToAction",
    "FormSummary",
    "NavigationSummary",
    "ScrapeResult",
    "AuditScore",
    "AuditOutcome",
    "CreateAuditRequest",
    "AuditRecord",
]
