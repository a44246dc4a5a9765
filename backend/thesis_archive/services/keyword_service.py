"""Research agenda keywords and the trending-keyword ranking.

Trending keywords are derived from visits: the most visited documents are
joined against their research agenda topics, and topics are ranked by how
many of those documents carry them. When visit data is too sparse to fill
the list, random topics are appended with a count of 1.
"""

from typing import List, Optional

import structlog
from sqlalchemy import distinct, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_archive.core.fallback import with_fallback
from thesis_archive.models.research_agenda import DocumentResearchAgenda, ResearchAgenda
from thesis_archive.services.page_visit_service import PageVisitService
from thesis_archive.services.results import TrendingKeywordRow

logger = structlog.get_logger(__name__)

# Hard ceiling on trending results, whatever the caller asks for
MAX_TRENDING_KEYWORDS = 10
# Most visited documents considered when ranking topics
TRENDING_DOCUMENT_POOL = 20
MAX_KEYWORDS_WITH_COUNTS = 1000


def _random_keywords_fallback(service: "KeywordService", limit: int = 10, days: Optional[int] = None):
    return service.get_random_keywords(min(limit, MAX_TRENDING_KEYWORDS))


class KeywordService:
    """Service for listing and ranking research agenda keywords."""

    def __init__(self, db: AsyncSession, visits: Optional[PageVisitService] = None):
        """Initialize keyword service.

        Args:
            db: Async database session
            visits: Visit service used for the most-visited lookup. Defaults
                to one sharing ``db``.
        """
        self.db = db
        self.visits = visits or PageVisitService(db)
        self.logger = logger.bind(service="keyword_service")

    @with_fallback([])
    async def get_all_keywords(self) -> List[str]:
        """Every non-empty topic name, unranked."""
        result = await self.db.execute(
            select(ResearchAgenda.name).where(ResearchAgenda.name.isnot(None))
        )
        return [name for name in result.scalars().all() if name and name.strip()]

    @with_fallback([], recover=_random_keywords_fallback)
    async def get_trending_keywords(
        self, limit: int = 10, days: Optional[int] = None
    ) -> List[TrendingKeywordRow]:
        """Rank topics by their presence on the most visited documents.

        Args:
            limit: Maximum number of keywords (never more than 10)
            days: Only consider visits from the trailing window of this many days

        Returns:
            Ranked keywords, count descending then name ascending, padded with
            random keywords (count 1) when fewer than ``limit`` were ranked.
            Padding is not deduplicated against the ranked entries.
        """
        effective_limit = min(limit, MAX_TRENDING_KEYWORDS)
        if effective_limit <= 0:
            return []

        most_visited = await self.visits.get_most_visited_documents(TRENDING_DOCUMENT_POOL, days)
        if not most_visited:
            self.logger.info("trending_keywords_no_visits", limit=effective_limit, days=days)
            return await self.get_random_keywords(effective_limit)

        document_ids = [doc.document_id for doc in most_visited]
        count = func.count().label("count")

        result = await self.db.execute(
            select(ResearchAgenda.name.label("keyword"), count)
            .join(
                DocumentResearchAgenda,
                ResearchAgenda.id == DocumentResearchAgenda.research_agenda_id,
            )
            .where(DocumentResearchAgenda.document_id.in_(document_ids))
            .where(ResearchAgenda.name.isnot(None))
            .group_by(ResearchAgenda.name)
            .order_by(count.desc(), ResearchAgenda.name.asc())
            # Over-fetch so truncation happens after ranking
            .limit(effective_limit * 2)
        )
        trending = [TrendingKeywordRow.from_row(row) for row in result.all()][:effective_limit]

        if len(trending) < effective_limit:
            padding = await self.get_random_keywords(effective_limit - len(trending))
            trending.extend(padding)

        self.logger.info(
            "trending_keywords_fetched",
            documents=len(document_ids),
            count=len(trending),
        )
        return trending

    @with_fallback([])
    async def get_random_keywords(self, limit: int = 5) -> List[TrendingKeywordRow]:
        """Up to ``min(limit, 10)`` random topic names, each with count 1."""
        effective_limit = min(limit, MAX_TRENDING_KEYWORDS)
        if effective_limit <= 0:
            return []

        result = await self.db.execute(
            select(ResearchAgenda.name)
            .where(ResearchAgenda.name.isnot(None))
            .order_by(func.random())
            .limit(effective_limit)
        )
        return [TrendingKeywordRow.random_fill(name) for name in result.scalars().all()]

    @with_fallback([])
    async def get_keywords_with_counts(self, limit: int = 100) -> List[TrendingKeywordRow]:
        """Topics with the number of distinct documents tagged with each.

        Not visit-weighted. Topics without documents are included with a
        count of 0.
        """
        effective_limit = min(limit, MAX_KEYWORDS_WITH_COUNTS)
        if effective_limit <= 0:
            return []

        count = func.count(distinct(DocumentResearchAgenda.document_id)).label("count")
        result = await self.db.execute(
            select(ResearchAgenda.name.label("keyword"), count)
            .outerjoin(
                DocumentResearchAgenda,
                ResearchAgenda.id == DocumentResearchAgenda.research_agenda_id,
            )
            .where(ResearchAgenda.name.isnot(None))
            .group_by(ResearchAgenda.name)
            .order_by(count.desc(), ResearchAgenda.name.asc())
            .limit(effective_limit)
        )
        return [TrendingKeywordRow.from_row(row) for row in result.all()]
