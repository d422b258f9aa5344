# Core package - Infrastructure components
# Celery, queue and store modules read settings at import; import them directly.
from .browser import HeadlessBrowserSession
from .exceptions import (
    AuditPipelineError,
    ConfigurationError,
    InvalidJobMessageError,
    InvalidAuditRequestError,
    AuditNotFoundError,
    ScrapeError,
    AuditEngineError,
)
from .results import JobErrorKind, JobError, JobResult, FailureRecording

__all__ = [
    # Browser
    "HeadlessBrowserSession",
    # Errors
    "AuditPipelineError",
    "ConfigurationError",
    "InvalidJobMessageError",
    "InvalidAuditRequestError",
    "AuditNotFoundError",
    "ScrapeError",
    "AuditEngineError",
    # Results
    "JobErrorKind",
    "JobError",
    "JobResult",
    "FailureRecording",
]
