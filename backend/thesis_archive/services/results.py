"""Typed result rows returned by the analytics services.

Each query result is converted into one of these structures exactly once,
in ``from_row``, so callers never deal with raw driver rows.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, List, Optional


def _as_int(value: Any) -> int:
    return int(value) if value is not None else 0


@dataclass
class TrendingKeywordRow:
    """A keyword with its co-occurrence (or sentinel) count."""

    keyword: str
    count: int

    @classmethod
    def from_row(cls, row: Any) -> "TrendingKeywordRow":
        return cls(keyword=row.keyword, count=_as_int(row.count))

    @classmethod
    def random_fill(cls, keyword: str) -> "TrendingKeywordRow":
        """Backfilled keyword, carrying the sentinel count of 1."""
        return cls(keyword=keyword, count=1)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DocumentVisitStats:
    """Visit aggregate for one document over the page visit log."""

    document_id: str
    document_type: Optional[str]
    visit_count: int
    last_visit_date: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Any) -> "DocumentVisitStats":
        return cls(
            document_id=str(row.document_id),
            document_type=row.document_type,
            visit_count=_as_int(row.visit_count),
            last_visit_date=row.last_visit_date,
        )

    def to_dict(self) -> dict:
        return {
            "document_id": self.document_id,
            "document_type": self.document_type,
            "visit_count": self.visit_count,
            "last_visit_date": self.last_visit_date.isoformat() if self.last_visit_date else None,
        }


@dataclass
class VisitBreakdown:
    """Visit totals split by visitor type."""

    guest: int = 0
    user: int = 0
    last_visit_date: Optional[datetime] = None

    @property
    def total(self) -> int:
        return self.guest + self.user

    @classmethod
    def from_rows(cls, rows: List[Any]) -> "VisitBreakdown":
        """Fold ``(visitor_type, count[, last_visit_date])`` rows together."""
        breakdown = cls()
        for row in rows:
            if row.visitor_type == "guest":
                breakdown.guest = _as_int(row.count)
            elif row.visitor_type == "user":
                breakdown.user = _as_int(row.count)

            last = getattr(row, "last_visit_date", None)
            if last is not None and (
                breakdown.last_visit_date is None or last > breakdown.last_visit_date
            ):
                breakdown.last_visit_date = last
        return breakdown

    def by_type(self) -> dict:
        return {"guest": self.guest, "user": self.user}

    def to_dict(self) -> dict:
        return {"total": self.total, "guest": self.guest, "user": self.user}


@dataclass
class DailyVisitCount:
    """One day of counter data."""

    date: str
    count: int = 0
    guest: int = 0
    user: int = 0


@dataclass
class VisitCounterSummary:
    """Counter-table totals plus a newest-first daily breakdown."""

    total: int = 0
    guest: int = 0
    user: int = 0
    daily: List[DailyVisitCount] = field(default_factory=list)

    @classmethod
    def from_rows(cls, rows: List[Any]) -> "VisitCounterSummary":
        """Build the summary from ``(day, visitor_type, visit_count)`` rows."""
        summary = cls()
        days: dict[str, DailyVisitCount] = {}

        for row in rows:
            day = row.day.isoformat()
            count = _as_int(row.visit_count)
            entry = days.setdefault(day, DailyVisitCount(date=day))

            if row.visitor_type == "guest":
                entry.guest += count
                summary.guest += count
            elif row.visitor_type == "user":
                entry.user += count
                summary.user += count
            else:
                continue
            entry.count += count

        summary.total = summary.guest + summary.user
        summary.daily = sorted(days.values(), key=lambda d: d.date, reverse=True)
        return summary

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PageVisitTotal:
    """Counter total for a single page path."""

    page_path: str
    total_visits: int

    @classmethod
    def from_row(cls, row: Any) -> "PageVisitTotal":
        return cls(page_path=row.page_path, total_visits=_as_int(row.total_visits))

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class VisitSeriesPoint:
    """Guest/user visits for one chart bucket (day, ISO week or month)."""

    label: str
    guest: int = 0
    user: int = 0

    @property
    def total(self) -> int:
        return self.guest + self.user

    def to_dict(self) -> dict:
        return {"label": self.label, "guest": self.guest, "user": self.user, "total": self.total}


@dataclass
class PurgeResult:
    """Number of rows removed from each visit table."""

    visits_deleted: int = 0
    pages_deleted: int = 0
    documents_deleted: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class TopAuthor:
    """An author profile ranked by visits."""

    author_id: str
    full_name: str
    profile_picture: Optional[str]
    visit_count: int

    @classmethod
    def from_row(cls, row: Any) -> "TopAuthor":
        return cls(
            author_id=str(row.author_id),
            full_name=row.full_name,
            profile_picture=row.profile_picture,
            visit_count=_as_int(row.visit_count),
        )

    def to_dict(self) -> dict:
        return asdict(self)
