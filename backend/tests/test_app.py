"""
Family Cookbook Backend — Application Wiring Tests
====================================================

What:  Health check, request ids, error envelope and static UI mounting.
"""

import logging
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from cookbook.main import create_app


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_connected(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"]


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_when_absent(self, client):
        response = await client.get("/api/recipes")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_value_echoed_in_header_and_error(self, client):
        response = await client.get("/api/recipes/404404", headers={"X-Request-ID": "trace-123"})

        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_not_found_shape(self, client):
        body = (await client.get("/api/recipes/31337")).json()

        assert set(body) >= {"error", "message", "request_id"}
        assert body["details"]["resource"] == "recipe"

    @pytest.mark.asyncio
    async def test_unknown_route_uses_envelope(self, client):
        response = await client.get("/api/nothing-here", headers={"X-Request-ID": "r-404"})

        assert response.status_code == 404
        assert response.json() == {
            "error": "not_found",
            "message": "Not Found",
            "request_id": "r-404",
        }


class TestAccessLog:

    @pytest.mark.asyncio
    async def test_api_request_logged_with_status_level(self, client, caplog):
        caplog.set_level(logging.INFO, logger="cookbook.access")

        await client.get("/api/categories", headers={"X-Request-ID": "log-ok"})
        await client.get("/api/recipes/777", headers={"X-Request-ID": "log-404"})
        await client.get("/health")

        records = {r.request_id: r for r in caplog.records if r.name == "cookbook.access"}
        assert set(records) == {"log-ok", "log-404"}
        assert records["log-ok"].levelno == logging.INFO
        assert records["log-ok"].status == 200
        assert records["log-404"].levelno == logging.WARNING
        assert records["log-404"].path == "/api/recipes/777"


class TestStaticUi:

    @pytest.mark.asyncio
    async def test_index_served_when_directory_exists(self, test_settings):
        static = Path(test_settings.static_dir)
        static.mkdir(parents=True, exist_ok=True)
        (static / "index.html").write_text("<h1>Family Cookbook</h1>", encoding="utf-8")

        app = create_app(test_settings)
        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as c:
                page = await c.get("/")
                api = await c.get("/api/categories")

        assert page.status_code == 200
        assert "Family Cookbook" in page.text
        assert api.json() == []


class TestEndToEnd:

    @pytest.mark.asyncio
    async def test_default_admin_uploads_and_publishes(self, test_settings):
        settings = test_settings.model_copy(update={"admin_display_name": "Admin"})
        app = create_app(settings)

        async with app.router.lifespan_context(app):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://testserver") as c:
                login = await c.post("/api/login", json={"username": "admin", "password": "admin123"})
                assert login.json() == {"success": True, "name": "Admin"}

                pending_id = (
                    await c.post(
                        "/api/upload-document",
                        files={"document": ("bread.txt", b"Soda bread", "text/plain")},
                    )
                ).json()["id"]
                recipe_id = (
                    await c.post(f"/api/pending-recipes/{pending_id}/publish", json={"title": "Soda Bread"})
                ).json()["id"]

                recipe = (await c.get(f"/api/recipes/{recipe_id}")).json()

        assert recipe["author_name"] == "Admin"
        assert recipe["title"] == "Soda Bread"
