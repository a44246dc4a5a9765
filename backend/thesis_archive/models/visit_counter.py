"""Per-day visit counters for pages, documents and author profiles."""

from datetime import date

from sqlalchemy import Date, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from thesis_archive.models.base import Base, IntegerPrimaryKeyMixin


class PageVisitCounter(IntegerPrimaryKeyMixin, Base):
    """Daily visit count for a normalized page path and visitor type."""

    __tablename__ = "page_visits_counter"

    page_path: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    visit_day: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    visitor_type: Mapped[str] = mapped_column(String(10), nullable=False)
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("page_path", "date", "visitor_type", name="uq_page_visits_counter_day"),
    )

    def __repr__(self) -> str:
        return f"<PageVisitCounter(page_path='{self.page_path}', date={self.visit_day}, visit_count={self.visit_count})>"


class DocumentVisitCounter(IntegerPrimaryKeyMixin, Base):
    """Daily visit count for a document and visitor type."""

    __tablename__ = "document_visits"

    doc_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    visit_day: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    visitor_type: Mapped[str] = mapped_column(String(10), nullable=False)
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("doc_id", "date", "visitor_type", name="uq_document_visits_day"),
    )

    def __repr__(self) -> str:
        return f"<DocumentVisitCounter(doc_id='{self.doc_id}', date={self.visit_day}, visit_count={self.visit_count})>"


class AuthorVisitCounter(IntegerPrimaryKeyMixin, Base):
    """Daily visit count for an author profile and visitor type."""

    __tablename__ = "author_visits_counter"

    author_id: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    visit_day: Mapped[date] = mapped_column("date", Date, nullable=False, index=True)
    visitor_type: Mapped[str] = mapped_column(String(10), nullable=False)
    visit_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("author_id", "date", "visitor_type", name="uq_author_visits_counter_day"),
    )

    def __repr__(self) -> str:
        return f"<AuthorVisitCounter(author_id='{self.author_id}', date={self.visit_day}, visit_count={self.visit_count})>"
