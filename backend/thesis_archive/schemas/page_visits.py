"""Page visit Pydantic schemas for request/response validation."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PageVisitCreateRequest(BaseModel):
    """Visit event posted by the public site's tracker script."""

    model_config = ConfigDict(populate_by_name=True)

    page_url: Optional[str] = Field(None, alias="pageUrl")
    visitor_type: Optional[str] = Field(None, alias="visitorType")
    user_id: Optional[str] = Field(None, alias="userId")
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("user_id", mode="before")
    @classmethod
    def coerce_user_id(cls, v: Union[str, int, None]) -> Optional[str]:
        """The tracker sends numeric ids for some accounts."""
        if v is None or v == "":
            return None
        return str(v)

    def resolved_visitor_type(self) -> str:
        """Anything other than an explicit 'user' counts as a guest."""
        return "user" if self.visitor_type == "user" else "guest"


class PageVisitResponse(BaseModel):
    """Stored visit row."""

    id: int
    page_url: str
    visitor_type: str
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    visit_date: Optional[datetime] = None
    metadata: Optional[Dict[str, Any]] = None


class RecordVisitResponse(BaseModel):
    """Result of POST /page-visits."""

    success: bool = True
    message: str
    data: PageVisitResponse


class VisitStats(BaseModel):
    """Visit totals split by visitor type."""

    total: int = 0
    guest: int = 0
    user: int = 0


class VisitStatsResponse(BaseModel):
    stats: VisitStats


class DocumentVisitStatsBody(VisitStats):
    last_visit_date: Optional[datetime] = None


class DailyVisit(BaseModel):
    date: str
    count: int
    guest: int
    user: int


class VisitCounters(VisitStats):
    """Counter-table totals plus newest-first daily breakdown."""

    daily: List[DailyVisit] = []


class DocumentVisitResponse(BaseModel):
    """Visit statistics for one document."""

    document_id: str
    days: int
    stats: DocumentVisitStatsBody
    counters: VisitCounters


class PageCountersResponse(BaseModel):
    page_path: str
    days: int
    counters: VisitCounters


class MostVisitedDocument(BaseModel):
    """Visited document with optional catalogue details."""

    document_id: str
    document_type: Optional[str] = None
    visit_count: int
    last_visit_date: Optional[datetime] = None
    title: Optional[str] = None
    keywords: Optional[List[str]] = None


class MostVisitedDocumentsResponse(BaseModel):
    documents: List[MostVisitedDocument]
    count: int
    timeframe: str


class PageVisitTotalResponse(BaseModel):
    page_path: str
    total_visits: int


class MostVisitedPagesResponse(BaseModel):
    pages: List[PageVisitTotalResponse]
    count: int
    days: int


class VisitSeriesPointResponse(BaseModel):
    label: str
    guest: int
    user: int
    total: int


class VisitSeriesResponse(BaseModel):
    """Chart data for the admin dashboard."""

    period: str
    data: List[VisitSeriesPointResponse]


class PurgeResponse(BaseModel):
    """Summary of a purge run."""

    success: bool = True
    older_than_days: int
    visits_deleted: int
    pages_deleted: int
    documents_deleted: int
