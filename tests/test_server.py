"""Tests for the FastAPI web service."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from rtfexport.server import app

FIXTURE_DIR = Path(__file__).parent / "fixtures"
SAMPLE_MD = FIXTURE_DIR / "sample.md"
SAMPLE_HTML = FIXTURE_DIR / "sample.html"


@pytest.fixture
def client():
    """Create an async test client."""
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest.mark.asyncio
class TestHealthEndpoint:

    async def test_health(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert "version" in data


@pytest.mark.asyncio
class TestStylesEndpoint:

    async def test_list_styles(self, client):
        resp = await client.get("/styles")
        assert resp.status_code == 200
        assert resp.json()["presets"] == ["default", "letter", "compact"]


@pytest.mark.asyncio
class TestConvertFileEndpoint:

    async def test_convert_markdown_upload(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("test.md", b"# Hello\n\nWorld", "text/markdown")},
            data={"style": "default"},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/rtf"
        assert resp.content.startswith(b"{\\rtf1")

    async def test_convert_html_upload(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("page.html", b"<p><b>bold</b></p>", "text/html")},
        )
        assert resp.status_code == 200
        assert b"{\\b bold}" in resp.content

    async def test_convert_to_hwpx(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("test.md", b"# Hello", "text/markdown")},
            data={"format": "hwpx"},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/hwpx+zip"
        assert zipfile.is_zipfile(io.BytesIO(resp.content))

    async def test_content_disposition_header(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("myfile.md", b"# Hello", "text/markdown")},
        )
        assert resp.status_code == 200
        assert "myfile.rtf" in resp.headers.get("content-disposition", "")

    async def test_non_ascii_filename(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("알림장.md", "# 알림".encode("utf-8"), "text/markdown")},
        )
        assert resp.status_code == 200
        assert "filename*=UTF-8''" in resp.headers["content-disposition"]

    async def test_convert_sample_fixture(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("sample.html", SAMPLE_HTML.read_bytes(), "text/html")},
            data={"style": "letter"},
        )
        assert resp.status_code == 200
        assert b"\\paperw12240" in resp.content

    async def test_undecodable_upload(self, client):
        resp = await client.post(
            "/convert",
            files={"file": ("bad.md", b"caf\xe9", "text/markdown")},
        )
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "E_INVALID_INPUT"


@pytest.mark.asyncio
class TestConvertTextEndpoint:

    async def test_convert_text(self, client):
        resp = await client.post(
            "/convert/text",
            data={"markdown": "# Hello\n\nParagraph."},
        )
        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/rtf"
        assert b"Paragraph." in resp.content

    async def test_korean_text(self, client):
        resp = await client.post(
            "/convert/text",
            data={"markdown": SAMPLE_MD.read_text(encoding="utf-8"), "style": "compact"},
        )
        assert resp.status_code == 200
        resp.content.decode("ascii")

    async def test_unknown_style(self, client):
        resp = await client.post(
            "/convert/text",
            data={"markdown": "# Hello", "style": "fancy"},
        )
        assert resp.status_code == 422
        assert resp.json()["error_code"] == "E_INVALID_INPUT"

    async def test_unknown_format(self, client):
        resp = await client.post(
            "/convert/text",
            data={"markdown": "# Hello", "format": "pdf"},
        )
        assert resp.status_code == 422


@pytest.mark.asyncio
class TestConvertHtmlEndpoint:

    async def test_convert_html(self, client):
        resp = await client.post(
            "/convert/html",
            data={"html": "<h1>Title</h1><p>Hello <b>world</b></p>"},
        )
        assert resp.status_code == 200
        assert b"{\\fs48\\b Title\\b0}" in resp.content

    async def test_too_deep(self, client):
        resp = await client.post(
            "/convert/html",
            data={"html": "<div>" * 150 + "x" + "</div>" * 150},
        )
        assert resp.status_code == 422
        body = resp.json()
        assert body["error_code"] == "E_NESTING_TOO_DEEP"
        assert body["error_message"] == "input too deeply nested"
