"""
Pytest configuration for the embed ad-blocker tests.

Outbound fetches never leave the process: ``mock_embed_fetch`` replaces the
httpx client factory with one backed by ``httpx.MockTransport``.
"""

from pathlib import Path
from unittest.mock import patch

import httpx
import pytest
from dotenv import load_dotenv

# Load .env file from project root
project_root = Path(__file__).parent.parent
load_dotenv(project_root / ".env")


def pytest_configure(config):
    """Configure pytest-asyncio mode."""
    config.addinivalue_line("markers", "asyncio: mark test as async")


@pytest.fixture
def mock_embed_fetch():
    """
    Factory fixture that routes embed page fetches to a handler.

    Usage:
        def test_something(mock_embed_fetch):
            requests = mock_embed_fetch(lambda request: httpx.Response(200, text="<html></html>"))
            ...
            assert requests[0].headers["referer"] == "https://host.example"
    """
    patchers = []

    def _install(handler):
        seen_requests = []

        async def _recording_handler(request: httpx.Request):
            seen_requests.append(request)
            response = handler(request)
            if not isinstance(response, httpx.Response):
                response = await response
            return response

        def _client_factory(**kwargs):
            return httpx.AsyncClient(transport=httpx.MockTransport(_recording_handler), follow_redirects=True)

        patcher = patch("embed_adblocker.extractors.base.create_httpx_client", side_effect=_client_factory)
        patcher.start()
        patchers.append(patcher)
        return seen_requests

    yield _install

    for patcher in patchers:
        patcher.stop()


@pytest.fixture
def html_page(mock_embed_fetch):
    """Serve a fixed HTML body for every fetch."""

    def _serve(body: str, status_code: int = 200):
        return mock_embed_fetch(lambda request: httpx.Response(status_code, text=body))

    return _serve
