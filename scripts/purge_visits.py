"""Purge visit logs and per-day counters older than a given number of days.

Usage:
    python scripts/purge_visits.py --older-than 365
"""

import argparse
import asyncio
import sys
import os

# Add backend to path so we can import thesis_archive modules
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "backend"))

from thesis_archive.config import settings
from thesis_archive.db.session import async_session_factory, engine
from thesis_archive.logging_config import configure_logging
from thesis_archive.services.author_visit_service import AuthorVisitService
from thesis_archive.services.page_visit_service import PageVisitService


async def purge(older_than: int) -> int:
    """Run the purge and print a summary. Returns a process exit code."""
    async with async_session_factory() as session:
        service = PageVisitService(session)
        result = await service.purge_old_visit_data(older_than=older_than)
        authors_deleted = await AuthorVisitService(session).purge_old_visit_data(older_than=older_than)

    await engine.dispose()

    print(f"Purged visit data older than {older_than} days:")
    print(f"  Visit log rows:    {result.visits_deleted}")
    print(f"  Page counters:     {result.pages_deleted}")
    print(f"  Document counters: {result.documents_deleted}")
    print(f"  Author counters:   {authors_deleted}")
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Purge old page and author visit data")
    parser.add_argument(
        "--older-than",
        type=int,
        default=settings.VISIT_RETENTION_DAYS,
        help=f"Age threshold in days (default: {settings.VISIT_RETENTION_DAYS})",
    )
    args = parser.parse_args()

    if args.older_than < 1:
        parser.error("--older-than must be at least 1")

    configure_logging(settings)
    return asyncio.run(purge(args.older_than))


if __name__ == "__main__":
    sys.exit(main())
