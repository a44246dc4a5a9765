"""Author profile visit endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from thesis_archive.dependencies import get_author_visit_service
from thesis_archive.schemas import (
    AuthorStatsResponse,
    AuthorVisitCreateRequest,
    AuthorVisitResponse,
    AuthorVisitStatsResponse,
    RecordAuthorVisitResponse,
    TopAuthorResponse,
    TopAuthorsResponse,
    VisitStats,
)
from thesis_archive.services.author_visit_service import AuthorVisitService

router = APIRouter()


@router.post("", response_model=RecordAuthorVisitResponse, status_code=201)
async def record_author_visit(
    body: AuthorVisitCreateRequest,
    request: Request,
    service: AuthorVisitService = Depends(get_author_visit_service),
):
    """Record a visit to an author profile.

    Unknown authors are answered with 404.
    """
    if not body.author_id or not body.author_id.strip():
        raise HTTPException(status_code=400, detail="Author ID is required")

    visit = await service.record_visit(
        author_id=body.author_id,
        visitor_type=body.resolved_visitor_type(),
        user_id=body.user_id,
        ip_address=request.client.host if request.client else None,
    )

    if visit is None:
        raise HTTPException(status_code=500, detail="Failed to record visit.")

    return RecordAuthorVisitResponse(
        success=True,
        message="Visit recorded successfully",
        data=AuthorVisitResponse(**visit.to_dict()),
    )


@router.get("/top-authors", response_model=TopAuthorsResponse)
async def get_top_authors(
    limit: int = Query(5, ge=1, le=100, description="Number of authors to return"),
    days: Optional[int] = Query(None, ge=1, description="Only count visits from the last N days"),
    service: AuthorVisitService = Depends(get_author_visit_service),
):
    """Get the most visited author profiles."""
    authors = await service.get_top_authors(limit=limit, days=days)
    return TopAuthorsResponse(
        top_authors=[TopAuthorResponse(**a.to_dict()) for a in authors],
        count=len(authors),
    )


@router.get("/stats", response_model=AuthorStatsResponse)
async def get_author_visit_totals(service: AuthorVisitService = Depends(get_author_visit_service)):
    """Get author profile visit totals across all authors."""
    stats = await service.get_total_visit_stats()
    return AuthorStatsResponse(stats=VisitStats(**stats.to_dict()))


@router.get("/{author_id}", response_model=AuthorVisitStatsResponse)
async def get_author_visit_stats(
    author_id: str,
    service: AuthorVisitService = Depends(get_author_visit_service),
):
    """Get all-time visit totals for one author."""
    if not author_id.strip():
        raise HTTPException(status_code=400, detail="Author ID is required")

    total_visits = await service.get_total_visits(author_id)
    by_type = await service.get_visits_by_type(author_id)

    return AuthorVisitStatsResponse(
        author_id=author_id,
        total_visits=total_visits,
        guest_visits=by_type.guest,
        user_visits=by_type.user,
    )
