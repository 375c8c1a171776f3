from abc import ABC, abstractmethod
from typing import Dict, Optional, Any

import anyio
import httpx
import logging

from embed_adblocker.configs import settings
from embed_adblocker.const import BROWSER_HEADERS
from embed_adblocker.utils.http_utils import create_httpx_client, get_origin, FetchError

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """Base class for embed page processors.

    Every instance serves exactly one request: it fetches the embed page once,
    without retries, under a hard deadline covering connect, headers and body.
    """

    def __init__(self, request_headers: Optional[dict] = None):
        self.base_headers = {
            "user-agent": settings.user_agent,
            **BROWSER_HEADERS,
        }
        self.base_headers.update(request_headers or {})
        self.total_requests = 0

    async def _make_request(
        self,
        url: str,
        timeout_ms: int,
        headers: Optional[Dict] = None,
    ) -> httpx.Response:
        """
        Fetch ``url`` once, aborting after ``timeout_ms`` milliseconds.

        Raises
        ------
        FetchError
            On timeout, transport failure or a non-2xx status.
        """
        request_headers = self.base_headers.copy()
        # referer defaults to the origin of the embed page
        request_headers.setdefault("referer", get_origin(url))
        if headers:
            request_headers.update(headers)

        seconds = timeout_ms / 1000
        self.total_requests += 1
        try:
            with anyio.fail_after(seconds):
                async with create_httpx_client(timeout=httpx.Timeout(seconds)) as client:
                    response = await client.get(url, headers=request_headers)
                    await response.aread()
        except (TimeoutError, httpx.TimeoutException):
            logger.warning("Timeout after %sms while fetching %s", timeout_ms, url)
            raise FetchError(504, f"Timeout after {timeout_ms}ms while fetching {url}")
        except httpx.HTTPError as e:
            logger.warning("Transport error while fetching %s: %s", url, e)
            raise FetchError(502, f"Request failed for URL {url}: {e}")

        if not response.is_success:
            logger.debug(
                "Non-2xx response for %s (status=%s) -- body preview: %s",
                url,
                response.status_code,
                response.text[:500],
            )
            raise FetchError(response.status_code, f"HTTP {response.status_code}: {response.reason_phrase}")

        return response

    @abstractmethod
    async def extract(self, url: str, timeout_ms: int, **kwargs) -> Any:
        """Process the embed page at ``url``."""
        pass
