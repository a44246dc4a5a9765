"""Author profiles and their visit log."""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from thesis_archive.models.base import Base, IntegerPrimaryKeyMixin
from thesis_archive.models.page_visit import _utcnow


class Author(Base):
    """Read-only view of a repository author profile."""

    __tablename__ = "authors"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    profile_picture: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<Author(id='{self.id}', full_name='{self.full_name}')>"


class AuthorVisit(IntegerPrimaryKeyMixin, Base):
    """One row per recorded author profile view."""

    __tablename__ = "author_visits"

    author_id: Mapped[str] = mapped_column(
        String(50),
        ForeignKey("authors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    visitor_type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
        comment="'guest' or 'user'"
    )
    user_id: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    ip_address: Mapped[Optional[str]] = mapped_column(String(45), nullable=True)
    visit_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_author_visits_author_type", "author_id", "visitor_type"),
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "author_id": self.author_id,
            "visitor_type": self.visitor_type,
            "user_id": self.user_id,
            "ip_address": self.ip_address,
            "visit_date": self.visit_date.isoformat() if self.visit_date else None,
        }

    def __repr__(self) -> str:
        return f"<AuthorVisit(id={self.id}, author_id='{self.author_id}', visitor_type='{self.visitor_type}')>"
