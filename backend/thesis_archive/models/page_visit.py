"""Append-only page visit log."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import JSON, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from thesis_archive.models.base import Base, IntegerPrimaryKeyMixin

VISITOR_TYPES = ("guest", "user")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PageVisit(IntegerPrimaryKeyMixin, Base):
    """One row per recorded page or document view.

    Rows are never updated. They only leave the table through the
    purge-by-age operation.
    """

    __tablename__ = "page_visits"

    page_url: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="URL path of the visited page"
    )
    visitor_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="'guest' or 'user'"
    )
    user_id: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Identifier of the logged-in visitor"
    )
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    visit_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
    # "metadata" is reserved on declarative classes, hence the attribute name
    visit_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column(
        "metadata",
        JSON(none_as_null=True),
        nullable=True,
        comment="Free-form visit context (documentId, documentType)"
    )

    __table_args__ = (
        Index("ix_page_visits_visitor_type_date", "visitor_type", "visit_date"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "page_url": self.page_url,
            "visitor_type": self.visitor_type,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "visit_date": self.visit_date.isoformat() if self.visit_date else None,
            "metadata": self.visit_metadata,
        }

    def __repr__(self) -> str:
        return f"<PageVisit(id={self.id}, page_url='{self.page_url}', visitor_type='{self.visitor_type}')>"
