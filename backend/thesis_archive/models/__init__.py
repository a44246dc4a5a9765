"""SQLAlchemy models for Thesis Archive analytics.

All models are imported here so they register with Base.metadata.
"""

from thesis_archive.models.base import Base, IntegerPrimaryKeyMixin
from thesis_archive.models.page_visit import PageVisit, VISITOR_TYPES
from thesis_archive.models.visit_counter import (
    AuthorVisitCounter,
    DocumentVisitCounter,
    PageVisitCounter,
)
from thesis_archive.models.author import Author, AuthorVisit
from thesis_archive.models.research_agenda import DocumentResearchAgenda, ResearchAgenda
from thesis_archive.models.document import CompiledDocumentItem, Document

__all__ = [
    "Base",
    "IntegerPrimaryKeyMixin",
    "PageVisit",
    "VISITOR_TYPES",
    "PageVisitCounter",
    "DocumentVisitCounter",
    "AuthorVisitCounter",
    "Author",
    "AuthorVisit",
    "ResearchAgenda",
    "DocumentResearchAgenda",
    "Document",
    "CompiledDocumentItem",
]
