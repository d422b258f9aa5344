"""
Explicit outcome types for the job pipeline.

The job handler reports success or a typed error instead of letting
exceptions decide retry behaviour; the queue adapter maps the error kind
onto the broker's reject/retry primitives.
"""

import enum
from dataclasses import dataclass
from typing import Optional


class JobErrorKind(str, enum.Enum):
    INVALID_MESSAGE = "invalid_message"  # never retried
    PROCESSING_FAILED = "processing_failed"  # handed to the queue's retry policy


@dataclass(frozen=True)
class JobError:
    kind: JobErrorKind
    exception: BaseException

    @property
    def retryable(self) -> bool:
        return self.kind is JobErrorKind.PROCESSING_FAILED


@dataclass(frozen=True)
class JobResult:
    value: Optional[dict] = None
    error: Optional[JobError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[dict] = None) -> "JobResult":
        return cls(value=value)

    @classmethod
    def failure(cls, kind: JobErrorKind, exception: BaseException) -> "JobResult":
        return cls(error=JobError(kind=kind, exception=exception))


@dataclass(frozen=True)
class FailureRecording:
    """
    Outcome of writing FAILED after a processing error.

    updated is False when the write itself failed; the audit may then remain
    in PROCESSING and log_error holds the write failure.
    """

    updated: bool
    log_error: Optional[BaseException] = None
