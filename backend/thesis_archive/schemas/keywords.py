"""Keyword Pydantic schemas for response serialization."""

from typing import List

from pydantic import BaseModel


class TrendingKeywordResponse(BaseModel):
    """Keyword with its document or visit count."""

    keyword: str
    count: int


class TrendingKeywordsResponse(BaseModel):
    """Trending keywords, both as bare names and with counts."""

    keywords: List[str]
    keywords_with_counts: List[TrendingKeywordResponse]


class KeywordsWithCountsResponse(TrendingKeywordsResponse):
    """Keywords with document counts for browsing views."""

    total_count: int
