"""Tests for document detail lookup and keyword parsing."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from thesis_archive.models import Document
from thesis_archive.services.document_service import DocumentService, parse_keywords


class TestParseKeywords:
    """Keywords arrive in several historical storage formats."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (None, []),
            ("", []),
            (["ecology", " soil "], ["ecology", "soil"]),
            ('["rice", "irrigation"]', ["rice", "irrigation"]),
            ("rice, irrigation ,, yield", ["rice", "irrigation", "yield"]),
            ({"a": "mangroves", "b": "coastal"}, ["mangroves", "coastal"]),
            ('{"a": "fisheries"}', ["fisheries"]),
            (42, []),
        ],
    )
    def test_formats(self, raw, expected):
        assert parse_keywords(raw) == expected


class TestDocumentDetails:
    """Tests for DocumentService.get_document_details."""

    async def test_details_keyed_by_id(self, test_db: AsyncSession):
        test_db.add_all([
            Document(id="1", title="Soil Health in Upland Farms", document_type="thesis", keywords="soil, farming"),
            Document(id="2", title="Coastal Resilience", document_type="dissertation", keywords='["coast"]'),
        ])
        await test_db.commit()

        service = DocumentService(test_db)
        details = await service.get_document_details(["1", "2", "missing"])

        assert set(details) == {"1", "2"}
        assert details["1"] == {
            "title": "Soil Health in Upland Farms",
            "document_type": "thesis",
            "keywords": ["soil", "farming"],
        }
        assert details["2"]["keywords"] == ["coast"]

    async def test_empty_ids_skip_query(self):
        db = MagicMock()
        db.execute = AsyncMock()

        service = DocumentService(db)

        assert await service.get_document_details([]) == {}
        db.execute.assert_not_awaited()

    async def test_returns_empty_on_failure(self):
        db = MagicMock()
        db.execute = AsyncMock(side_effect=SQLAlchemyError("no such table: documents"))
        db.rollback = AsyncMock()

        service = DocumentService(db)

        assert await service.get_document_details(["1"]) == {}
