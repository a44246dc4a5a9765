"""Research agenda topics and their document associations."""

from typing import Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from thesis_archive.models.base import Base, IntegerPrimaryKeyMixin


class ResearchAgenda(IntegerPrimaryKeyMixin, Base):
    """A named subject tag attachable to documents.

    Managed by the document editing flow; the analytics side only reads it.
    """

    __tablename__ = "research_agenda"

    name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)

    def __repr__(self) -> str:
        return f"<ResearchAgenda(id={self.id}, name='{self.name}')>"


class DocumentResearchAgenda(Base):
    """Many-to-many link between documents and research agenda topics."""

    __tablename__ = "document_research_agenda"

    document_id: Mapped[str] = mapped_column(String(50), primary_key=True)
    research_agenda_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("research_agenda.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<DocumentResearchAgenda(document_id='{self.document_id}', research_agenda_id={self.research_agenda_id})>"
