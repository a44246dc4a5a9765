"""Page and document visit tracking.

Every visit lands in two places: the append-only ``page_visits`` log, which
feeds the most-visited and per-document aggregations, and a per-day counter
row (``page_visits_counter`` or ``document_visits``) used for the dashboard
charts and rolling-window statistics.

All reads and writes here are best-effort. A failing query is logged and
answered with an empty result so visit tracking never breaks the page view
that triggered it.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_archive.core.exceptions import ValidationFailed
from thesis_archive.core.fallback import with_fallback
from thesis_archive.db.counters import increment_daily_counter
from thesis_archive.models.document import CompiledDocumentItem
from thesis_archive.models.page_visit import PageVisit, VISITOR_TYPES
from thesis_archive.models.visit_counter import DocumentVisitCounter, PageVisitCounter
from thesis_archive.services.results import (
    DocumentVisitStats,
    PageVisitTotal,
    PurgeResult,
    VisitBreakdown,
    VisitCounterSummary,
    VisitSeriesPoint,
)

logger = structlog.get_logger(__name__)

HOME_PAGE_URLS = ("/", "/index.html", "/index")
SERIES_PERIODS = ("daily", "weekly", "monthly")


def normalize_page_path(page_url: str) -> str:
    """Counter rows are keyed on a trimmed, lower-cased path."""
    return page_url.strip().lower()


def _today() -> date:
    return datetime.now(timezone.utc).date()


def _bucket_label(day: date, period: str) -> str:
    if period == "weekly":
        iso = day.isocalendar()
        return f"{iso[0]}-W{iso[1]:02d}"
    if period == "monthly":
        return day.strftime("%Y-%m")
    return day.isoformat()


def _series_start(today: date, period: str) -> date:
    """First day covered by a chart period.

    daily covers the last 7 days, weekly the last 4 ISO weeks and monthly
    the last 6 calendar months, each including the current one.
    """
    if period == "weekly":
        monday = today - timedelta(days=today.weekday())
        return monday - timedelta(weeks=3)
    if period == "monthly":
        year, month = today.year, today.month - 5
        while month <= 0:
            month += 12
            year -= 1
        return date(year, month, 1)
    return today - timedelta(days=6)


class PageVisitService:
    """Service for recording visits and aggregating visit statistics.

    The database session is injected so that each request works on its own
    session and tests can pass in a throwaway one.
    """

    def __init__(self, db: AsyncSession):
        """Initialize page visit service.

        Args:
            db: Async database session
        """
        self.db = db
        self.logger = logger.bind(service="page_visit_service")

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    async def record_visit(
        self,
        page_url: str,
        visitor_type: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[PageVisit]:
        """Record one page or document visit.

        Bumps the matching per-day counter first, then appends the visit to
        the log.

        Args:
            page_url: URL path of the visited page (required)
            visitor_type: 'guest' or 'user'
            user_id: Identifier of the logged-in visitor
            ip_address: Client IP address
            metadata: Optional context; ``documentId`` marks a document visit

        Returns:
            The stored visit, or None when it could not be persisted

        Raises:
            ValidationFailed: If page_url is empty or visitor_type is unknown
        """
        if not page_url or not page_url.strip():
            raise ValidationFailed("page_url is required")
        if visitor_type not in VISITOR_TYPES:
            raise ValidationFailed(f"visitor_type must be one of {', '.join(VISITOR_TYPES)}")

        metadata = dict(metadata) if metadata else None
        if metadata and metadata.get("documentId") is not None:
            # Stored as text so JSON extraction compares equal on every backend
            metadata["documentId"] = str(metadata["documentId"])

        await self.record_visit_counter(page_url, visitor_type, metadata)
        return await self._insert_visit(page_url, visitor_type, user_id, ip_address, metadata)

    @with_fallback(None)
    async def _insert_visit(
        self,
        page_url: str,
        visitor_type: str,
        user_id: Optional[str],
        ip_address: Optional[str],
        metadata: Optional[Dict[str, Any]],
    ) -> Optional[PageVisit]:
        visit = PageVisit(
            page_url=page_url,
            visitor_type=visitor_type,
            user_id=user_id,
            ip_address=ip_address,
            visit_metadata=metadata,
        )
        self.db.add(visit)
        await self.db.commit()
        await self.db.refresh(visit)

        self.logger.debug(
            "visit_recorded",
            visit_id=visit.id,
            page_url=page_url,
            visitor_type=visitor_type,
        )
        return visit

    @with_fallback(0)
    async def record_visit_counter(
        self,
        page_url: str,
        visitor_type: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Increment today's counter for a page, or for a document visit.

        Returns:
            The counter value after the increment (0 on failure)
        """
        if metadata and metadata.get("documentId") is not None:
            return await self.record_document_visit(str(metadata["documentId"]), visitor_type)

        count = await increment_daily_counter(
            self.db,
            PageVisitCounter,
            page_path=normalize_page_path(page_url),
            visit_day=_today(),
            visitor_type=visitor_type,
        )
        await self.db.commit()
        return count

    @with_fallback(0)
    async def record_document_visit(self, document_id: str, visitor_type: str) -> int:
        """Increment today's counter for a document.

        Returns:
            The counter value after the increment (0 on failure)
        """
        count = await increment_daily_counter(
            self.db,
            DocumentVisitCounter,
            doc_id=document_id,
            visit_day=_today(),
            visitor_type=visitor_type,
        )
        await self.db.commit()
        return count

    # ------------------------------------------------------------------
    # Visit log aggregation
    # ------------------------------------------------------------------

    @with_fallback(0)
    async def get_total_visits(self, page_url: str) -> int:
        """Total number of logged visits for one page URL."""
        result = await self.db.execute(
            select(func.count(PageVisit.id)).where(PageVisit.page_url == page_url)
        )
        return result.scalar() or 0

    @with_fallback(VisitBreakdown())
    async def get_visits_by_type(self, page_url: str) -> VisitBreakdown:
        """Guest/user split of the logged visits for one page URL."""
        result = await self.db.execute(
            select(PageVisit.visitor_type, func.count(PageVisit.id).label("count"))
            .where(PageVisit.page_url == page_url)
            .group_by(PageVisit.visitor_type)
        )
        return VisitBreakdown.from_rows(result.all())

    @with_fallback(VisitBreakdown())
    async def get_total_visit_stats(self) -> VisitBreakdown:
        """Guest/user split across every logged visit."""
        result = await self.db.execute(
            select(PageVisit.visitor_type, func.count(PageVisit.id).label("count"))
            .group_by(PageVisit.visitor_type)
        )
        return VisitBreakdown.from_rows(result.all())

    @with_fallback(VisitBreakdown())
    async def get_home_page_visit_stats(self) -> VisitBreakdown:
        """Guest/user split for the home page and its aliases."""
        result = await self.db.execute(
            select(PageVisit.visitor_type, func.count(PageVisit.id).label("count"))
            .where(PageVisit.page_url.in_(HOME_PAGE_URLS))
            .group_by(PageVisit.visitor_type)
        )
        return VisitBreakdown.from_rows(result.all())

    @with_fallback([])
    async def get_most_visited_documents(
        self,
        limit: int = 10,
        days: Optional[int] = None,
        exclude_children: bool = False,
    ) -> List[DocumentVisitStats]:
        """Rank documents by logged visits.

        Only visits whose metadata carries a ``documentId`` count. Ties on
        visit count go to the document visited most recently.

        Args:
            limit: Maximum number of documents to return
            days: Only count visits from the trailing window of this many days
            exclude_children: Drop documents that belong to a compiled volume

        Returns:
            List of DocumentVisitStats, most visited first
        """
        document_id = PageVisit.visit_metadata["documentId"].as_string()
        document_type = PageVisit.visit_metadata["documentType"].as_string()
        document_id_col = document_id.label("document_id")
        document_type_col = document_type.label("document_type")
        visit_count = func.count(PageVisit.id).label("visit_count")
        last_visit_date = func.max(PageVisit.visit_date).label("last_visit_date")

        query = (
            select(
                document_id_col,
                document_type_col,
                visit_count,
                last_visit_date,
            )
            .where(PageVisit.visit_metadata.isnot(None))
            .where(document_id.isnot(None))
        )

        if days:
            cutoff = datetime.now(timezone.utc) - timedelta(days=days)
            query = query.where(PageVisit.visit_date >= cutoff)

        if exclude_children:
            query = query.where(
                document_id.not_in(select(CompiledDocumentItem.document_id))
            )

        query = (
            # Group on the output labels so PostgreSQL matches the select list
            query.group_by(document_id_col, document_type_col)
            .order_by(visit_count.desc(), last_visit_date.desc())
            .limit(limit)
        )

        result = await self.db.execute(query)
        documents = [DocumentVisitStats.from_row(row) for row in result.all()]

        self.logger.info(
            "most_visited_documents_fetched",
            limit=limit,
            days=days,
            count=len(documents),
        )
        return documents

    @with_fallback(VisitBreakdown())
    async def get_document_visit_stats(self, document_id: str) -> VisitBreakdown:
        """Guest/user split and last visit time for one document."""
        result = await self.db.execute(
            select(
                PageVisit.visitor_type,
                func.count(PageVisit.id).label("count"),
                func.max(PageVisit.visit_date).label("last_visit_date"),
            )
            .where(PageVisit.visit_metadata["documentId"].as_string() == str(document_id))
            .group_by(PageVisit.visitor_type)
        )
        return VisitBreakdown.from_rows(result.all())

    # ------------------------------------------------------------------
    # Counter aggregation
    # ------------------------------------------------------------------

    @with_fallback(VisitCounterSummary())
    async def get_document_visit_counters(
        self, document_id: str, days: int = 30
    ) -> VisitCounterSummary:
        """Counter totals and daily breakdown for one document."""
        cutoff = _today() - timedelta(days=days)
        result = await self.db.execute(
            select(
                DocumentVisitCounter.visit_day.label("day"),
                DocumentVisitCounter.visitor_type,
                DocumentVisitCounter.visit_count,
            )
            .where(
                DocumentVisitCounter.doc_id == str(document_id),
                DocumentVisitCounter.visit_day >= cutoff,
            )
            .order_by(DocumentVisitCounter.visit_day.desc(), DocumentVisitCounter.visitor_type)
        )
        return VisitCounterSummary.from_rows(result.all())

    @with_fallback(VisitCounterSummary())
    async def get_page_visit_counters(
        self, page_path: str, days: int = 30
    ) -> VisitCounterSummary:
        """Counter totals and daily breakdown for one page path."""
        cutoff = _today() - timedelta(days=days)
        result = await self.db.execute(
            select(
                PageVisitCounter.visit_day.label("day"),
                PageVisitCounter.visitor_type,
                PageVisitCounter.visit_count,
            )
            .where(
                PageVisitCounter.page_path == normalize_page_path(page_path),
                PageVisitCounter.visit_day >= cutoff,
            )
            .order_by(PageVisitCounter.visit_day.desc(), PageVisitCounter.visitor_type)
        )
        return VisitCounterSummary.from_rows(result.all())

    @with_fallback([])
    async def get_most_visited_pages(
        self, limit: int = 10, days: int = 30
    ) -> List[PageVisitTotal]:
        """Pages with the highest counter totals in the trailing window."""
        cutoff = _today() - timedelta(days=days)
        total_visits = func.sum(PageVisitCounter.visit_count).label("total_visits")
        result = await self.db.execute(
            select(PageVisitCounter.page_path, total_visits)
            .where(PageVisitCounter.visit_day >= cutoff)
            .group_by(PageVisitCounter.page_path)
            .order_by(total_visits.desc())
            .limit(limit)
        )
        return [PageVisitTotal.from_row(row) for row in result.all()]

    async def get_visit_series(self, period: str = "daily") -> List[VisitSeriesPoint]:
        """Guest/user visit totals bucketed for the dashboard chart.

        Args:
            period: 'daily' (7 days), 'weekly' (4 ISO weeks) or 'monthly' (6 months)

        Returns:
            One point per bucket, oldest first, zero-filled

        Raises:
            ValidationFailed: If period is not recognised
        """
        if period not in SERIES_PERIODS:
            raise ValidationFailed(f"period must be one of {', '.join(SERIES_PERIODS)}")
        return await self._visit_series(period)

    @with_fallback([])
    async def _visit_series(self, period: str) -> List[VisitSeriesPoint]:
        today = _today()
        start = _series_start(today, period)

        points: Dict[str, VisitSeriesPoint] = {}
        day = start
        while day <= today:
            label = _bucket_label(day, period)
            if label not in points:
                points[label] = VisitSeriesPoint(label=label)
            day += timedelta(days=1)

        for model in (PageVisitCounter, DocumentVisitCounter):
            result = await self.db.execute(
                select(
                    model.visit_day.label("day"),
                    model.visitor_type,
                    func.sum(model.visit_count).label("visit_count"),
                )
                .where(model.visit_day >= start)
                .group_by(model.visit_day, model.visitor_type)
            )
            for row in result.all():
                point = points.get(_bucket_label(row.day, period))
                if point is None:
                    continue
                if row.visitor_type == "guest":
                    point.guest += int(row.visit_count or 0)
                elif row.visitor_type == "user":
                    point.user += int(row.visit_count or 0)

        return list(points.values())

    # ------------------------------------------------------------------
    # Retention
    # ------------------------------------------------------------------

    async def purge_old_visit_data(self, older_than: int = 365) -> PurgeResult:
        """Delete visit data older than ``older_than`` days.

        Removes log rows whose visit time falls before the cutoff and counter
        rows for days before it. Newer data is untouched.

        Raises:
            ValidationFailed: If older_than is not a positive number of days
        """
        if older_than < 1:
            raise ValidationFailed("older_than must be at least 1 day")
        return await self._purge(older_than)

    @with_fallback(PurgeResult())
    async def _purge(self, older_than: int) -> PurgeResult:
        cutoff = datetime.now(timezone.utc) - timedelta(days=older_than)
        cutoff_day = _today() - timedelta(days=older_than)

        visits = await self.db.execute(
            delete(PageVisit)
            .where(PageVisit.visit_date < cutoff)
            .execution_options(synchronize_session=False)
        )
        pages = await self.db.execute(
            delete(PageVisitCounter)
            .where(PageVisitCounter.visit_day < cutoff_day)
            .execution_options(synchronize_session=False)
        )
        documents = await self.db.execute(
            delete(DocumentVisitCounter)
            .where(DocumentVisitCounter.visit_day < cutoff_day)
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        purged = PurgeResult(
            visits_deleted=visits.rowcount or 0,
            pages_deleted=pages.rowcount or 0,
            documents_deleted=documents.rowcount or 0,
        )
        self.logger.info("visit_data_purged", older_than=older_than, **purged.to_dict())
        return purged
