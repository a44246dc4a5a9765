"""FastAPI dependency injection providers."""

from typing import AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_archive.db.session import async_session_factory
from thesis_archive.services import (
    AuthorVisitService,
    DocumentService,
    KeywordService,
    PageVisitService,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Yield a database session for request-scoped usage.

    The session is automatically committed on success or rolled back on error.
    Always closed after the request completes.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_page_visit_service(db: AsyncSession = Depends(get_db)) -> PageVisitService:
    return PageVisitService(db)


def get_keyword_service(db: AsyncSession = Depends(get_db)) -> KeywordService:
    return KeywordService(db)


def get_document_service(db: AsyncSession = Depends(get_db)) -> DocumentService:
    return DocumentService(db)


def get_author_visit_service(db: AsyncSession = Depends(get_db)) -> AuthorVisitService:
    return AuthorVisitService(db)

