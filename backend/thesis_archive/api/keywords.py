"""Keyword API endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from thesis_archive.dependencies import get_keyword_service
from thesis_archive.schemas import (
    KeywordsWithCountsResponse,
    TrendingKeywordResponse,
    TrendingKeywordsResponse,
)
from thesis_archive.services.keyword_service import KeywordService

router = APIRouter()


@router.get("/keywords", response_model=List[str])
async def list_keywords(
    limit: Optional[int] = Query(None, ge=1, description="Maximum number of keywords (default: all)"),
    service: KeywordService = Depends(get_keyword_service),
):
    """Get every research agenda keyword."""
    keywords = await service.get_all_keywords()
    return keywords[:limit] if limit else keywords


@router.get("/trending-keywords", response_model=TrendingKeywordsResponse)
async def get_trending_keywords(
    limit: int = Query(10, ge=1, description="Number of keywords to return (capped at 10)"),
    days: Optional[int] = Query(None, ge=1, description="Only consider visits from the last N days"),
    service: KeywordService = Depends(get_keyword_service),
):
    """Get trending keywords based on the most visited documents.

    Keywords are ranked by how many of the most visited documents carry
    them. When visit data is sparse the list is padded with random
    keywords, each with a count of 1.
    """
    trending = await service.get_trending_keywords(limit=limit, days=days)

    return TrendingKeywordsResponse(
        keywords=[k.keyword for k in trending],
        keywords_with_counts=[TrendingKeywordResponse(**k.to_dict()) for k in trending],
    )


@router.get("/keywords-with-counts", response_model=KeywordsWithCountsResponse)
async def get_keywords_with_counts(
    limit: int = Query(100, ge=1, description="Number of keywords to return (capped at 1000)"),
    service: KeywordService = Depends(get_keyword_service),
):
    """Get keywords with the number of documents tagged with each."""
    keywords = await service.get_keywords_with_counts(limit=limit)

    return KeywordsWithCountsResponse(
        keywords=[k.keyword for k in keywords],
        keywords_with_counts=[TrendingKeywordResponse(**k.to_dict()) for k in keywords],
        total_count=len(keywords),
    )
