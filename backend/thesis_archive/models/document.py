"""Read-only views of repository documents used to enrich visit listings."""

from datetime import date
from typing import Optional

from sqlalchemy import Date, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from thesis_archive.models.base import Base


class Document(Base):
    """A thesis, dissertation or compiled volume entry."""

    __tablename__ = "documents"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    document_type: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    publication_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    keywords: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="JSON array or comma-separated keyword list"
    )

    def __repr__(self) -> str:
        return f"<Document(id='{self.id}', title='{self.title}')>"


class CompiledDocumentItem(Base):
    """Membership of a child document in a compiled volume."""

    __tablename__ = "compiled_document_items"

    compiled_document_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    document_id: Mapped[str] = mapped_column(String(50), primary_key=True, index=True)
