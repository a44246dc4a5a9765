"""API integration tests for the analytics endpoints."""

from datetime import datetime, timedelta, timezone

import httpx

from conftest import add_document_visits, add_topics
from thesis_archive.dependencies import get_keyword_service
from thesis_archive.main import app
from thesis_archive.models import Author, AuthorVisitCounter, CompiledDocumentItem, Document, PageVisit


class TestKeywordEndpoints:
    """Tests for the keyword listing and trending endpoints."""

    async def test_list_keywords_with_limit(self, client, test_db):
        await add_topics(test_db, {"Ecology": [], "Fisheries": [], "Soil Science": []})

        response = await client.get("/api/keywords", params={"limit": 2})

        assert response.status_code == 200
        assert len(response.json()) == 2

    async def test_trending_keywords_shape(self, client, test_db):
        await add_topics(test_db, {"Agronomy": ["1", "2"], "Forestry": ["2"]})
        await add_document_visits(test_db, "1", 3)
        await add_document_visits(test_db, "2", 1)

        response = await client.get("/api/trending-keywords", params={"limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["keywords"] == ["Agronomy", "Forestry"]
        assert data["keywords_with_counts"] == [
            {"keyword": "Agronomy", "count": 2},
            {"keyword": "Forestry", "count": 1},
        ]

    async def test_trending_keywords_capped_at_ten(self, client, test_db):
        await add_topics(test_db, {f"Topic {i:02d}": [] for i in range(15)})

        response = await client.get("/api/trending-keywords", params={"limit": 50})

        assert response.status_code == 200
        data = response.json()
        assert len(data["keywords"]) == 10
        assert all(k["count"] == 1 for k in data["keywords_with_counts"])

    async def test_trending_keywords_invalid_limit(self, client):
        response = await client.get("/api/trending-keywords", params={"limit": 0})

        assert response.status_code == 400
        assert "error" in response.json()

    async def test_keywords_with_counts(self, client, test_db):
        await add_topics(test_db, {"Hydrology": ["1", "2", "3"], "Geology": ["1"], "Botany": []})

        response = await client.get("/api/keywords-with-counts")

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 3
        assert data["keywords_with_counts"] == [
            {"keyword": "Hydrology", "count": 3},
            {"keyword": "Geology", "count": 1},
            {"keyword": "Botany", "count": 0},
        ]

    async def test_unexpected_error_returns_500(self):
        class _BrokenService:
            async def get_all_keywords(self):
                raise RuntimeError("unexpected")

        app.dependency_overrides[get_keyword_service] = lambda: _BrokenService()
        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        try:
            async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
                response = await http.get("/api/keywords")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestRecordVisitEndpoint:
    """Tests for POST /api/page-visits."""

    async def test_records_document_visit(self, client, test_db):
        response = await client.post(
            "/api/page-visits",
            json={
                "pageUrl": "/document/42",
                "visitorType": "user",
                "userId": 7,
                "metadata": {"documentId": 42, "documentType": "single"},
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["data"]["page_url"] == "/document/42"
        assert data["data"]["visitor_type"] == "user"
        assert data["data"]["user_id"] == "7"
        assert data["data"]["metadata"]["documentId"] == "42"

        stats = await client.get("/api/page-visits/documents/42")
        assert stats.json()["stats"]["user"] == 1
        assert stats.json()["counters"]["total"] == 1

    async def test_missing_page_url(self, client):
        response = await client.post("/api/page-visits", json={"visitorType": "guest"})

        assert response.status_code == 400
        assert response.json() == {"error": "Page URL is required"}

    async def test_unknown_visitor_type_counts_as_guest(self, client):
        response = await client.post(
            "/api/page-visits",
            json={"pageUrl": "/about", "visitorType": "robot"},
        )

        assert response.status_code == 201
        assert response.json()["data"]["visitor_type"] == "guest"

    async def test_page_counters_endpoint(self, client):
        for _ in range(2):
            await client.post("/api/page-visits", json={"pageUrl": " /About "})

        response = await client.get("/api/page-visits/pages/counters", params={"path": "/about"})

        assert response.status_code == 200
        counters = response.json()["counters"]
        assert counters["guest"] == 2
        assert counters["daily"][0]["count"] == 2


class TestVisitStatisticsEndpoints:
    """Tests for the read-only statistics endpoints."""

    async def test_stats_totals(self, client, test_db):
        await add_document_visits(test_db, "1", 2, visitor_type="guest")
        await add_document_visits(test_db, "1", 1, visitor_type="user")

        response = await client.get("/api/page-visits/stats")

        assert response.status_code == 200
        assert response.json()["stats"] == {"total": 3, "guest": 2, "user": 1}

    async def test_home_stats(self, client, test_db):
        test_db.add_all([
            PageVisit(page_url="/", visitor_type="guest"),
            PageVisit(page_url="/index.html", visitor_type="user"),
            PageVisit(page_url="/about", visitor_type="guest"),
        ])
        await test_db.commit()

        response = await client.get("/api/page-visits/home-stats")

        assert response.json()["stats"] == {"total": 2, "guest": 1, "user": 1}

    async def test_daily_series(self, client):
        await client.post("/api/page-visits", json={"pageUrl": "/", "visitorType": "user"})

        response = await client.get("/api/page-visits/stats/daily")

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == "daily"
        assert len(data["data"]) == 7
        assert data["data"][-1]["user"] == 1
        assert data["data"][-1]["total"] == 1

    async def test_unknown_series_period(self, client):
        response = await client.get("/api/page-visits/stats/hourly")

        assert response.status_code == 400

    async def test_most_visited_documents_enriched(self, client, test_db):
        test_db.add(Document(id="5", title="Mangrove Carbon Stocks", document_type="thesis", keywords="mangroves, carbon"))
        await test_db.commit()
        await add_document_visits(test_db, "5", 3)
        await add_document_visits(test_db, "9", 1)

        response = await client.get("/api/page-visits/most-visited-documents", params={"days": 7})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert data["timeframe"] == "7 days"
        first, second = data["documents"]
        assert first["document_id"] == "5"
        assert first["visit_count"] == 3
        assert first["title"] == "Mangrove Carbon Stocks"
        assert first["keywords"] == ["mangroves", "carbon"]
        assert second["document_id"] == "9"
        assert second["title"] is None

    async def test_most_visited_documents_without_children(self, client, test_db):
        test_db.add(CompiledDocumentItem(compiled_document_id="100", document_id="5"))
        await test_db.commit()
        await add_document_visits(test_db, "5", 3)
        await add_document_visits(test_db, "100", 1, document_type="compiled")

        response = await client.get(
            "/api/page-visits/most-visited-documents",
            params={"include_children": "false"},
        )

        data = response.json()
        assert data["timeframe"] == "all time"
        assert [d["document_id"] for d in data["documents"]] == ["100"]

    async def test_most_visited_documents_limit_bounds(self, client):
        response = await client.get("/api/page-visits/most-visited-documents", params={"limit": 500})

        assert response.status_code == 400
        assert "limit" in response.json()["error"]

    async def test_most_visited_pages(self, client):
        for url in ["/about", "/about", "/browse"]:
            await client.post("/api/page-visits", json={"pageUrl": url})

        response = await client.get("/api/page-visits/most-visited-pages")

        data = response.json()
        assert data["pages"][0] == {"page_path": "/about", "total_visits": 2}
        assert data["count"] == 2


class TestPurgeEndpoint:
    """Tests for DELETE /api/page-visits/purge."""

    async def test_purge_older_than(self, client, test_db):
        old = datetime.now(timezone.utc) - timedelta(days=60)
        await add_document_visits(test_db, "1", 2, visited_at=old)
        await add_document_visits(test_db, "1", 1)

        response = await client.delete("/api/page-visits/purge", params={"olderThan": 30})

        assert response.status_code == 200
        data = response.json()
        assert data["older_than_days"] == 30
        assert data["visits_deleted"] == 2

        stats = await client.get("/api/page-visits/stats")
        assert stats.json()["stats"]["total"] == 1

    async def test_purge_rejects_zero(self, client):
        response = await client.delete("/api/page-visits/purge", params={"olderThan": 0})

        assert response.status_code == 400


class TestAuthorVisitEndpoints:
    """Tests for /api/author-visits."""

    async def test_record_and_read_author_visit(self, client, test_db):
        test_db.add(Author(id="a1", full_name="Maria Santos"))
        await test_db.commit()

        response = await client.post(
            "/api/author-visits",
            json={"authorId": "a1", "visitorType": "user", "userId": 9},
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["author_id"] == "a1"
        assert data["visitor_type"] == "user"
        assert data["user_id"] == "9"

        stats = await client.get("/api/author-visits/a1")
        assert stats.json() == {
            "author_id": "a1",
            "total_visits": 1,
            "guest_visits": 0,
            "user_visits": 1,
        }

    async def test_missing_author_id(self, client):
        response = await client.post("/api/author-visits", json={"visitorType": "guest"})

        assert response.status_code == 400
        assert response.json() == {"error": "Author ID is required"}

    async def test_unknown_author(self, client):
        response = await client.post("/api/author-visits", json={"authorId": "ghost"})

        assert response.status_code == 404
        assert response.json() == {"error": "Author with identifier 'ghost' not found"}

    async def test_top_authors(self, client, test_db):
        test_db.add_all([
            Author(id="a1", full_name="Ana Cruz"),
            Author(id="a2", full_name="Ben Reyes"),
        ])
        await test_db.commit()
        for author_id in ["a2", "a2", "a1"]:
            await client.post("/api/author-visits", json={"authorId": author_id})

        response = await client.get("/api/author-visits/top-authors", params={"limit": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 1
        assert data["top_authors"][0]["author_id"] == "a2"
        assert data["top_authors"][0]["visit_count"] == 2

    async def test_author_stats(self, client, test_db):
        today = datetime.now(timezone.utc).date()
        test_db.add_all([
            AuthorVisitCounter(author_id="a1", visit_day=today, visitor_type="guest", visit_count=3),
            AuthorVisitCounter(author_id="a2", visit_day=today, visitor_type="user", visit_count=1),
        ])
        await test_db.commit()

        response = await client.get("/api/author-visits/stats")

        assert response.json()["stats"] == {"total": 4, "guest": 3, "user": 1}


class TestHealthEndpoint:
    async def test_health(self, client):
        response = await client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}

    async def test_root(self, client):
        response = await client.get("/")

        assert response.json()["health"] == "/api/health"
