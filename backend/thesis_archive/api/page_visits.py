"""Page visit tracking and statistics endpoints."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request

from thesis_archive.config import settings
from thesis_archive.dependencies import get_document_service, get_page_visit_service
from thesis_archive.schemas import (
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
from thesis_archive.services.document_service import DocumentService
from thesis_archive.services.page_visit_service import PageVisitService

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("", response_model=RecordVisitResponse, status_code=201)
async def record_page_visit(
    body: PageVisitCreateRequest,
    request: Request,
    service: PageVisitService = Depends(get_page_visit_service),
):
    """Record a visit to a page or document.

    A ``metadata.documentId`` marks the visit as a document view, which is
    what the most-visited and trending-keyword rankings count.
    """
    if not body.page_url or not body.page_url.strip():
        raise HTTPException(status_code=400, detail="Page URL is required")

    visit = await service.record_visit(
        page_url=body.page_url,
        visitor_type=body.resolved_visitor_type(),
        user_id=body.user_id,
        ip_address=request.client.host if request.client else None,
        metadata=body.metadata,
    )

    if visit is None:
        raise HTTPException(status_code=500, detail="Failed to record visit.")

    return RecordVisitResponse(
        success=True,
        message="Visit recorded successfully",
        data=PageVisitResponse(**visit.to_dict()),
    )


@router.get("/stats", response_model=VisitStatsResponse)
async def get_visit_stats(service: PageVisitService = Depends(get_page_visit_service)):
    """Get visit totals across all pages."""
    stats = await service.get_total_visit_stats()
    return VisitStatsResponse(stats=VisitStats(**stats.to_dict()))


@router.get("/home-stats", response_model=VisitStatsResponse)
async def get_home_page_visit_stats(service: PageVisitService = Depends(get_page_visit_service)):
    """Get visit totals for the home page."""
    stats = await service.get_home_page_visit_stats()
    return VisitStatsResponse(stats=VisitStats(**stats.to_dict()))


@router.get("/stats/{period}", response_model=VisitSeriesResponse)
async def get_visit_series(
    period: str = Path(..., pattern="^(daily|weekly|monthly)$", description="Chart period"),
    service: PageVisitService = Depends(get_page_visit_service),
):
    """Get guest/user visit series for the dashboard chart.

    - daily: last 7 days
    - weekly: last 4 ISO weeks
    - monthly: last 6 months
    """
    points = await service.get_visit_series(period)
    return VisitSeriesResponse(
        period=period,
        data=[VisitSeriesPointResponse(**p.to_dict()) for p in points],
    )


@router.get("/most-visited-documents", response_model=MostVisitedDocumentsResponse)
async def get_most_visited_documents(
    limit: int = Query(10, ge=1, le=100, description="Number of documents to return"),
    days: Optional[int] = Query(None, ge=1, description="Only count visits from the last N days"),
    include_children: bool = Query(True, description="Include documents that belong to a compiled volume"),
    service: PageVisitService = Depends(get_page_visit_service),
    documents: DocumentService = Depends(get_document_service),
):
    """Get the most visited documents with their catalogue details.

    Details (title, type, keywords) are best-effort; documents missing from
    the catalogue are still listed with their visit counts.
    """
    most_visited = await service.get_most_visited_documents(
        limit=limit,
        days=days,
        exclude_children=not include_children,
    )
    details = await documents.get_document_details(d.document_id for d in most_visited)

    listing = []
    for doc in most_visited:
        info = details.get(doc.document_id, {})
        listing.append(
            MostVisitedDocument(
                document_id=doc.document_id,
                document_type=info.get("document_type") or doc.document_type,
                visit_count=doc.visit_count,
                last_visit_date=doc.last_visit_date,
                title=info.get("title"),
                keywords=info.get("keywords"),
            )
        )

    return MostVisitedDocumentsResponse(
        documents=listing,
        count=len(listing),
        timeframe=f"{days} days" if days else "all time",
    )


@router.get("/most-visited-pages", response_model=MostVisitedPagesResponse)
async def get_most_visited_pages(
    limit: int = Query(10, ge=1, le=100, description="Number of pages to return"),
    days: int = Query(settings.COUNTER_WINDOW_DAYS, ge=1, description="Look-back window in days"),
    service: PageVisitService = Depends(get_page_visit_service),
):
    """Get the pages with the highest visit counters."""
    pages = await service.get_most_visited_pages(limit=limit, days=days)
    return MostVisitedPagesResponse(
        pages=[PageVisitTotalResponse(**p.to_dict()) for p in pages],
        count=len(pages),
        days=days,
    )


@router.get("/pages/counters", response_model=PageCountersResponse)
async def get_page_visit_counters(
    path: str = Query(..., min_length=1, description="Page path, e.g. /about"),
    days: int = Query(settings.COUNTER_WINDOW_DAYS, ge=1, description="Look-back window in days"),
    service: PageVisitService = Depends(get_page_visit_service),
):
    """Get daily visit counters for one page."""
    counters = await service.get_page_visit_counters(path, days=days)
    return PageCountersResponse(
        page_path=path,
        days=days,
        counters=VisitCounters(**counters.to_dict()),
    )


@router.get("/documents/{document_id}", response_model=DocumentVisitResponse)
async def get_document_visit_stats(
    document_id: str,
    days: int = Query(settings.COUNTER_WINDOW_DAYS, ge=1, description="Look-back window for daily counters"),
    service: PageVisitService = Depends(get_page_visit_service),
):
    """Get visit statistics for a single document."""
    if not document_id.strip():
        raise HTTPException(status_code=400, detail="Document ID is required")

    stats = await service.get_document_visit_stats(document_id)
    counters = await service.get_document_visit_counters(document_id, days=days)

    return DocumentVisitResponse(
        document_id=document_id,
        days=days,
        stats=DocumentVisitStatsBody(
            **stats.to_dict(),
            last_visit_date=stats.last_visit_date,
        ),
        counters=VisitCounters(**counters.to_dict()),
    )


@router.delete("/purge", response_model=PurgeResponse)
async def purge_old_visits(
    older_than: int = Query(
        settings.VISIT_RETENTION_DAYS,
        alias="olderThan",
        ge=1,
        description="Delete visit data older than this many days",
    ),
    service: PageVisitService = Depends(get_page_visit_service),
):
    """Delete visit log rows and counters older than the given age."""
    purged = await service.purge_old_visit_data(older_than=older_than)
    logger.info("purge_requested", older_than=older_than, **purged.to_dict())

    return PurgeResponse(
        success=True,
        older_than_days=older_than,
        **purged.to_dict(),
    )
