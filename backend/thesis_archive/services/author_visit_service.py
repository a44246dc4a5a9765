"""Author profile visit tracking.

Author visits follow the same two-table layout as page visits: an
``author_visits`` log row per view plus a per-day ``author_visits_counter``
row per visitor type. Reads prefer the counters and fall back to the log
for authors whose history predates them.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_archive.core.exceptions import NotFoundError, ValidationFailed
from thesis_archive.core.fallback import with_fallback
from thesis_archive.db.counters import increment_daily_counter
from thesis_archive.models.author import Author, AuthorVisit
from thesis_archive.models.page_visit import VISITOR_TYPES
from thesis_archive.models.visit_counter import AuthorVisitCounter
from thesis_archive.services.results import TopAuthor, VisitBreakdown, VisitCounterSummary

logger = structlog.get_logger(__name__)

MAX_TOP_AUTHORS = 100


def _today():
    return datetime.now(timezone.utc).date()


class AuthorVisitService:
    """Service for recording and ranking author profile visits."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logger.bind(service="author_visit_service")

    @with_fallback(False)
    async def author_exists(self, author_id: str) -> bool:
        """Whether ``author_id`` names a known author profile."""
        result = await self.db.execute(select(Author.id).where(Author.id == author_id))
        return result.scalar_one_or_none() is not None

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    async def record_visit(
        self,
        author_id: str,
        visitor_type: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> Optional[AuthorVisit]:
        """Record one view of an author profile.

        Returns:
            The stored visit, or None when it could not be persisted

        Raises:
            ValidationFailed: If author_id is empty or visitor_type is unknown
            NotFoundError: If no author has this id
        """
        if not author_id or not str(author_id).strip():
            raise ValidationFailed("author_id is required")
        if visitor_type not in VISITOR_TYPES:
            raise ValidationFailed(f"visitor_type must be one of {', '.join(VISITOR_TYPES)}")

        author_id = str(author_id)
        if not await self.author_exists(author_id):
            raise NotFoundError("Author", author_id)

        return await self._insert_visit(author_id, visitor_type, user_id, ip_address)

    @with_fallback(None)
    async def _insert_visit(
        self,
        author_id: str,
        visitor_type: str,
        user_id: Optional[str],
        ip_address: Optional[str],
    ) -> Optional[AuthorVisit]:
        await self.record_visit_counter(author_id, visitor_type)

        visit = AuthorVisit(
            author_id=author_id,
            visitor_type=visitor_type,
            user_id=user_id,
            ip_address=ip_address,
        )
        self.db.add(visit)
        await self.db.commit()
        await self.db.refresh(visit)

        self.logger.debug("author_visit_recorded", visit_id=visit.id, author_id=author_id)
        return visit

    @with_fallback(0)
    async def record_visit_counter(self, author_id: str, visitor_type: str = "guest") -> int:
        """Increment today's counter for an author.

        Returns:
            The counter value after the increment, or 0 when the author does
            not exist or the write failed
        """
        if not await self.author_exists(author_id):
            self.logger.warning("author_not_found", author_id=author_id)
            return 0

        count = await increment_daily_counter(
            self.db,
            AuthorVisitCounter,
            author_id=author_id,
            visit_day=_today(),
            visitor_type=visitor_type,
        )
        await self.db.commit()
        return count

    # ------------------------------------------------------------------
    # Per-author statistics
    # ------------------------------------------------------------------

    @with_fallback(VisitCounterSummary())
    async def get_author_visit_counters(self, author_id: str, days: int = 30) -> VisitCounterSummary:
        """Counter totals and newest-first daily breakdown for one author."""
        cutoff = _today() - timedelta(days=days)
        result = await self.db.execute(
            select(
                AuthorVisitCounter.visit_day.label("day"),
                AuthorVisitCounter.visitor_type,
                AuthorVisitCounter.visit_count,
            )
            .where(
                AuthorVisitCounter.author_id == author_id,
                AuthorVisitCounter.visit_day >= cutoff,
            )
            .order_by(AuthorVisitCounter.visit_day.desc(), AuthorVisitCounter.visitor_type)
        )
        return VisitCounterSummary.from_rows(result.all())

    @with_fallback(0)
    async def get_total_visits(self, author_id: str) -> int:
        """All-time visits for one author, from counters or else the log."""
        result = await self.db.execute(
            select(func.coalesce(func.sum(AuthorVisitCounter.visit_count), 0))
            .where(AuthorVisitCounter.author_id == author_id)
        )
        total = int(result.scalar_one() or 0)
        if total > 0:
            return total

        result = await self.db.execute(
            select(func.count(AuthorVisit.id)).where(AuthorVisit.author_id == author_id)
        )
        return int(result.scalar_one() or 0)

    @with_fallback(VisitBreakdown())
    async def get_visits_by_type(self, author_id: str) -> VisitBreakdown:
        """Guest/user split for one author, from counters or else the log."""
        result = await self.db.execute(
            select(
                AuthorVisitCounter.visitor_type,
                func.sum(AuthorVisitCounter.visit_count).label("count"),
            )
            .where(AuthorVisitCounter.author_id == author_id)
            .group_by(AuthorVisitCounter.visitor_type)
        )
        rows = result.all()
        if rows:
            return VisitBreakdown.from_rows(rows)

        result = await self.db.execute(
            select(AuthorVisit.visitor_type, func.count(AuthorVisit.id).label("count"))
            .where(AuthorVisit.author_id == author_id)
            .group_by(AuthorVisit.visitor_type)
        )
        return VisitBreakdown.from_rows(result.all())

    # ------------------------------------------------------------------
    # Site-wide statistics
    # ------------------------------------------------------------------

    @with_fallback(VisitBreakdown())
    async def get_total_visit_stats(self) -> VisitBreakdown:
        """Guest/user split across all authors, from counters or else the log."""
        result = await self.db.execute(
            select(
                AuthorVisitCounter.visitor_type,
                func.sum(AuthorVisitCounter.visit_count).label("count"),
            ).group_by(AuthorVisitCounter.visitor_type)
        )
        rows = result.all()
        if rows:
            return VisitBreakdown.from_rows(rows)

        result = await self.db.execute(
            select(AuthorVisit.visitor_type, func.count(AuthorVisit.id).label("count"))
            .group_by(AuthorVisit.visitor_type)
        )
        return VisitBreakdown.from_rows(result.all())

    @with_fallback([])
    async def get_top_authors(self, limit: int = 5, days: Optional[int] = None) -> List[TopAuthor]:
        """Rank authors by visits.

        Counters are ranked first. Without counter data the visit log is
        used, and without any visits every author is listed alphabetically
        with a count of 0. Authors missing from ``authors`` are skipped.

        Args:
            limit: Maximum number of authors (never more than 100)
            days: Only count visits from the trailing window of this many days
        """
        effective_limit = min(limit, MAX_TOP_AUTHORS)
        if effective_limit <= 0:
            return []

        visit_count = func.sum(AuthorVisitCounter.visit_count).label("visit_count")
        query = (
            select(
                Author.id.label("author_id"),
                Author.full_name,
                Author.profile_picture,
                visit_count,
            )
            .join(AuthorVisitCounter, AuthorVisitCounter.author_id == Author.id)
            .group_by(Author.id, Author.full_name, Author.profile_picture)
            .order_by(visit_count.desc(), Author.full_name.asc())
            .limit(effective_limit)
        )
        if days:
            query = query.where(AuthorVisitCounter.visit_day >= _today() - timedelta(days=days))

        result = await self.db.execute(query)
        authors = [TopAuthor.from_row(row) for row in result.all()]
        if authors:
            return authors

        log_count = func.count(AuthorVisit.id).label("visit_count")
        query = (
            select(
                Author.id.label("author_id"),
                Author.full_name,
                Author.profile_picture,
                log_count,
            )
            .join(AuthorVisit, AuthorVisit.author_id == Author.id)
            .group_by(Author.id, Author.full_name, Author.profile_picture)
            .order_by(log_count.desc(), Author.full_name.asc())
            .limit(effective_limit)
        )
        if days:
            cutoff = datetime.now(timezone.utc) - timedelta(days=days)
            query = query.where(AuthorVisit.visit_date >= cutoff)

        result = await self.db.execute(query)
        authors = [TopAuthor.from_row(row) for row in result.all()]
        if authors:
            self.logger.info("top_authors_from_visit_log", count=len(authors))
            return authors

        result = await self.db.execute(
            select(Author).order_by(Author.full_name.asc()).limit(effective_limit)
        )
        return [
            TopAuthor(
                author_id=author.id,
                full_name=author.full_name,
                profile_picture=author.profile_picture,
                visit_count=0,
            )
            for author in result.scalars().all()
        ]

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    async def purge_old_visit_data(self, older_than: int = 365) -> int:
        """Delete author counter rows for days before ``today - older_than``.

        Returns:
            Number of counter rows deleted

        Raises:
            ValidationFailed: If older_than is not a positive number of days
        """
        if older_than < 1:
            raise ValidationFailed("older_than must be at least 1 day")
        return await self._purge(older_than)

    @with_fallback(0)
    async def _purge(self, older_than: int) -> int:
        cutoff_day = _today() - timedelta(days=older_than)
        result = await self.db.execute(
            delete(AuthorVisitCounter)
            .where(AuthorVisitCounter.visit_day < cutoff_day)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        deleted = result.rowcount or 0
        self.logger.info("author_visit_data_purged", older_than=older_than, counters_deleted=deleted)
        return deleted
