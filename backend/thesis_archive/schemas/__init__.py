"""Pydantic schemas for the Thesis Archive analytics API.

All request/response models are defined here for easy import.
"""

from thesis_archive.schemas.author_visits import (
    AuthorStatsResponse,
    AuthorVisitCreateRequest,
    AuthorVisitResponse,
    AuthorVisitStatsResponse,
    RecordAuthorVisitResponse,
    TopAuthorResponse,
    TopAuthorsResponse,
)
from thesis_archive.schemas.common import ErrorResponse
from thesis_archive.schemas.health import HealthCheckResponse
from thesis_archive.schemas.keywords import (
    KeywordsWithCountsResponse,
    TrendingKeywordResponse,
    TrendingKeywordsResponse,
)
from thesis_archive.schemas.page_visits import (
    DailyVisit,
    DocumentVisitResponse,
    DocumentVisitStatsBody,
    MostVisitedDocument,
    MostVisitedDocumentsResponse,
    MostVisitedPagesResponse,
    PageCountersResponse,
    PageVisitCreateRequest,
    PageVisitResponse,
    PageVisitTotalResponse,
    PurgeResponse,
    RecordVisitResponse,
    VisitCounters,
    VisitSeriesPointResponse,
    VisitSeriesResponse,
    VisitStats,
    VisitStatsResponse,
)

__all__ = [
    # Common
    "ErrorResponse",
    # Health
    "HealthCheckResponse",
    # Keywords
    "TrendingKeywordResponse",
    "TrendingKeywordsResponse",
    "KeywordsWithCountsResponse",
    # Page visits
    "PageVisitCreateRequest",
    "PageVisitResponse",
    "RecordVisitResponse",
    "VisitStats",
    "VisitStatsResponse",
    "DocumentVisitStatsBody",
    "DailyVisit",
    "VisitCounters",
    "DocumentVisitResponse",
    "PageCountersResponse",
    "MostVisitedDocument",
    "MostVisitedDocumentsResponse",
    "PageVisitTotalResponse",
    "MostVisitedPagesResponse",
    "VisitSeriesPointResponse",
    "VisitSeriesResponse",
    "PurgeResponse",
    # Author visits
    "AuthorVisitCreateRequest",
    "AuthorVisitResponse",
    "RecordAuthorVisitResponse",
    "TopAuthorResponse",
    "TopAuthorsResponse",
    "AuthorVisitStatsResponse",
    "AuthorStatsResponse",
]
