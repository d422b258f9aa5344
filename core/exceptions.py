"""
Exception hierarchy for the audit pipeline.

Engines wrap their failures with the target URL so a log line or a task
traceback identifies the site without further context.
"""


class AuditPipelineError(Exception):
    """Base class for every error raised by the audit pipeline"""


class ConfigurationError(AuditPipelineError):
    """Raised when a required endpoint (queue or datastore) is not configured"""


class InvalidJobMessageError(AuditPipelineError):
    """Raised when a queued job payload is malformed"""


class InvalidAuditRequestError(AuditPipelineError):
    """Raised when an audit request carries an unusable URL"""


class AuditNotFoundError(AuditPipelineError):
    """Raised when the record store has no audit for the given id"""

    def __init__(self, audit_id: str):
        super().__init__(f"Audit {audit_id} not found")
        self.audit_id = audit_id


class EngineError(AuditPipelineError):
    """Failure inside an engine, carrying the URL it was working on"""

    prefix = "Engine failed on"

    def __init__(self, url: str, cause, stage: str = None):
        reason = str(cause) if str(cause) else "Unknown error occurred"
        if stage:
            reason = f"{stage}: {reason}"
        super().__init__(f"{self.prefix} {url}: {reason}")
        self.url = url
        self.cause = cause


class ScrapeError(EngineError):
    """Raised when the website scraper cannot produce a result"""

    prefix = "Failed to scrape website"


class AuditEngineError(EngineError):
    """Raised when the Lighthouse audit cannot produce scores"""

    prefix = "Failed to run Lighthouse audit on"
