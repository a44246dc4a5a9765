"""Pytest configuration and shared fixtures."""

import os

# Must be set before thesis_archive.config is imported anywhere
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")

from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, Optional

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from thesis_archive.models import (
    Base,
    DocumentResearchAgenda,
    PageVisit,
    ResearchAgenda,
)


@pytest.fixture
def anyio_backend():
    """Use asyncio as the async backend for tests."""
    return "asyncio"


@pytest_asyncio.fixture
async def session_factory():
    """In-memory SQLite database shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def file_session_factory(tmp_path):
    """File-backed SQLite database for tests that need several connections."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'visits.db'}",
        connect_args={"timeout": 30},
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def test_db(session_factory) -> AsyncSession:
    """A session on the in-memory test database."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    """HTTP client bound to the app, with get_db pointed at the test database."""
    from thesis_archive.dependencies import get_db
    from thesis_archive.main import app

    async def _get_test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _get_test_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


async def add_topics(db: AsyncSession, tagging: Dict[str, Iterable[str]]) -> Dict[str, ResearchAgenda]:
    """Create topics and tag documents with them.

    ``tagging`` maps topic name to the document ids carrying it; an empty
    iterable creates an untagged topic.
    """
    topics = {}
    for name, document_ids in tagging.items():
        topic = ResearchAgenda(name=name)
        db.add(topic)
        await db.flush()
        topics[name] = topic
        for document_id in document_ids:
            db.add(DocumentResearchAgenda(document_id=str(document_id), research_agenda_id=topic.id))
    await db.commit()
    return topics


async def add_document_visits(
    db: AsyncSession,
    document_id: str,
    count: int,
    visitor_type: str = "guest",
    document_type: str = "single",
    visited_at: Optional[datetime] = None,
) -> None:
    """Insert ``count`` logged visits for a document."""
    visited_at = visited_at or datetime.now(timezone.utc)
    for i in range(count):
        db.add(
            PageVisit(
                page_url=f"/document/{document_id}",
                visitor_type=visitor_type,
                visit_date=visited_at - timedelta(seconds=i),
                visit_metadata={"documentId": str(document_id), "documentType": document_type},
            )
        )
    await db.commit()
