"""Services module for visit analytics and keyword aggregation.

Services take an injected AsyncSession and return typed result rows
(see ``results``).
"""

from thesis_archive.services.author_visit_service import AuthorVisitService
from thesis_archive.services.document_service import DocumentService, parse_keywords
from thesis_archive.services.keyword_service import KeywordService
from thesis_archive.services.page_visit_service import PageVisitService

__all__ = [
    "AuthorVisitService",
    "DocumentService",
    "KeywordService",
    "PageVisitService",
    "parse_keywords",
]
