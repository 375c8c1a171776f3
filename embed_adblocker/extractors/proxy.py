import html as html_lib
import logging
import re
from typing import Dict, Optional

from embed_adblocker.configs import settings
from embed_adblocker.const import FRAMING_HEADERS, NO_CACHE_HEADERS
from embed_adblocker.extractors.base import BaseExtractor
from embed_adblocker.schemas import RewrittenDocument
from embed_adblocker.utils.antiadblock import bypass_anti_adblock
from embed_adblocker.utils.assets import render_asset

logger = logging.getLogger(__name__)

_HEAD_CLOSE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)


def document_headers() -> Dict[str, str]:
    """Headers sent with every HTML document this service produces."""
    return {
        "Content-Type": "text/html; charset=utf-8",
        **FRAMING_HEADERS,
        **NO_CACHE_HEADERS,
    }


def build_extractor_script(poll_interval_ms: Optional[int] = None, max_attempts: Optional[int] = None) -> str:
    script = render_asset(
        "extractor.js",
        poll_interval_ms=str(poll_interval_ms or settings.client_poll_interval_ms),
        max_attempts=str(max_attempts or settings.client_max_attempts),
    )
    return f'<script id="embed-extractor">\n{script}</script>\n'


def inject_extractor_script(html: str, script: str) -> str:
    """Insert ``script`` before ``</head>``, else before ``</body>``, else at the end."""
    for pattern in (_HEAD_CLOSE, _BODY_CLOSE):
        modified, count = pattern.subn(lambda m: script + m.group(0), html, count=1)
        if count:
            return modified
    return html + script


def build_error_document(message: str) -> str:
    return (
        "<!DOCTYPE html><html><body><h1>Error</h1>"
        f"<p>{html_lib.escape(message)}</p></body></html>"
    )


def build_wrapper_document(url: str) -> RewrittenDocument:
    """
    Build the degraded fallback: a page that iframes ``url`` unmodified.

    The wrapper cannot reach into the cross-origin frame, so it only blocks
    ``window.open``, intercepts ``beforeunload`` navigation and restores its own
    location when it drifts.
    """
    logger.info(f"[Wrapper Mode] Creating inline wrapper for: {url}")
    wrapper_html = render_asset("wrapper.html", embed_url=html_lib.escape(url, quote=True))
    return RewrittenDocument(html=wrapper_html, headers={**document_headers(), "X-Embed-Mode": "degraded-wrapper"})


class ProxyRewriter(BaseExtractor):
    """Returns the embed page with detectors stripped and the client extractor injected."""

    def __init__(self, request_headers: Optional[dict] = None, inject_shim: Optional[bool] = None):
        super().__init__(request_headers)
        self.inject_shim = settings.enable_counter_shim if inject_shim is None else inject_shim

    async def extract(self, url: str, timeout_ms: int, **kwargs) -> RewrittenDocument:
        logger.info(f"[Proxy Mode] Fetching and modifying embed: {url}")
        response = await self._make_request(url, timeout_ms)
        page = response.text
        logger.info(f"[Proxy] Fetched {len(page)} bytes, injecting extractor...")

        page = bypass_anti_adblock(page, inject_shim=self.inject_shim)
        page = inject_extractor_script(page, build_extractor_script())

        return RewrittenDocument(html=page, headers=document_headers())
