from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from db.models import AuditStatus


class CamelModel(BaseModel):
    """Serializes to camelCase (the wire format) while accepting either form"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Queue payload
class AuditJobMessage(CamelModel):
    audit_id: StrictStr

    @field_validator("audit_id")
    @classmethod
    def audit_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("auditId must be a non-empty string")
        return value


# Scraper output
class PageMetadata(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None


class Heading(CamelModel):
    tag: Literal["H1", "H2", "H3"]
    text: str = Field(min_length=1)


class CallToAction(CamelModel):
    text: str = Field(min_length=3)
    is_above_the_fold: bool


class FormSummary(CamelModel):
    input_count: int = Field(ge=0)


class NavigationSummary(CamelModel):
    link_count: int = Field(default=0, ge=0)


class ScrapeResult(CamelModel):
    metadata: PageMetadata
    headings: List[Heading] = []
    ctas: List[CallToAction] = []
    forms: List[FormSummary] = []
    navigation: NavigationSummary = NavigationSummary()
    screenshot_path: str


# Lighthouse output
class AuditScore(CamelModel):
    performance: int = Field(ge=0, le=100)
    accessibility: int = Field(ge=0, le=100)
    seo: int = Field(ge=0, le=100)


class AuditOutcome(CamelModel):
    """Transient results of one processing attempt"""
    audit_id: str
    scrape: ScrapeResult
    scores: AuditScore


# Record store / intake
class CreateAuditRequest(BaseModel):
    url: str


class AuditRecord(CamelModel):
    """Read-only snapshot of an audit row. Failure reasons are not persisted."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: str
    user_id: str
    url: str
    status: AuditStatus
    created_at: datetime
    updated_at: datetime
