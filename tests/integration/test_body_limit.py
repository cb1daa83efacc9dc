"""Regression tests for RequestBodyLimitMiddleware."""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient

from yamlassist.api.app import build_engine, create_app
from yamlassist.api.deps import init_engine, reset_engine
from yamlassist.settings import Settings


@pytest.fixture
def app():
    settings = Settings()
    application = create_app(settings=settings)
    init_engine(build_engine(settings))
    yield application
    reset_engine()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


class TestInvalidContentLength:
    """Non-integer Content-Length must not cause a 500."""

    async def test_non_integer_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            "/health",
            content=b"small body",
            headers={"content-length": "not-a-number"},
        )
        assert response.status_code != 500

    async def test_negative_content_length(self, client: AsyncClient) -> None:
        response = await client.post(
            "/health",
            content=b"small body",
            headers={"content-length": "-1"},
        )
        assert response.status_code != 500


class TestLimits:
    async def test_default_limit(self, client: AsyncClient) -> None:
        response = await client.post("/schemas", content=b"x" * (64 * 1024 + 1))
        assert response.status_code == 413
        assert "too large" in response.json()["detail"]

    async def test_document_endpoints_allow_large_documents(self, client: AsyncClient) -> None:
        document = "Some prose.\n" * 10_000
        response = await client.post("/lint", json={"code": document})
        assert response.status_code == 200
        assert response.json()["errors"] == []

    async def test_chunked_body_over_default_limit(self, client: AsyncClient) -> None:
        oversized = b"x" * (64 * 1024 + 1)
        response = await client.post(
            "/schemas",
            content=oversized,
            headers={"transfer-encoding": "chunked"},
        )
        assert response.status_code == 413
        assert "too large" in response.json()["detail"]

    async def test_document_over_limit(self, client: AsyncClient) -> None:
        oversized = b"x" * (5 * 1024 * 1024 + 1)
        response = await client.post("/validate", content=oversized)
        assert response.status_code == 413
