"""Document details used to enrich visit listings."""

import json
from typing import Any, Dict, Iterable, List

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_archive.core.fallback import with_fallback
from thesis_archive.models.document import Document

logger = structlog.get_logger(__name__)


def parse_keywords(raw: Any) -> List[str]:
    """Normalize a stored keyword value into a list of strings.

    Keywords have been stored as arrays, JSON-encoded strings and plain
    comma-separated strings over time; all three are accepted.
    """
    if raw is None:
        return []

    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return []
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = None

        if isinstance(decoded, list):
            raw = decoded
        elif isinstance(decoded, dict):
            raw = list(decoded.values())
        else:
            return [k.strip() for k in text.split(",") if k.strip()]

    if isinstance(raw, dict):
        raw = list(raw.values())

    if isinstance(raw, (list, tuple)):
        return [str(k).strip() for k in raw if k is not None and str(k).strip()]

    return []


class DocumentService:
    """Read-only access to document titles, types and keywords."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.logger = logger.bind(service="document_service")

    @with_fallback({})
    async def get_document_details(self, document_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Map document id to ``{title, document_type, keywords}``.

        Unknown ids are simply absent from the result.
        """
        ids = [str(i) for i in document_ids]
        if not ids:
            return {}

        result = await self.db.execute(select(Document).where(Document.id.in_(ids)))

        details = {}
        for document in result.scalars().all():
            details[document.id] = {
                "title": document.title,
                "document_type": document.document_type,
                "keywords": parse_keywords(document.keywords),
            }
        return details
