import logging
import time
from typing import List, Optional, Sequence, Pattern
from urllib.parse import urljoin

from embed_adblocker.const import AD_DOMAINS, URL_ATTRIBUTE_PATTERNS, JS_VARIABLE_PATTERNS
from embed_adblocker.extractors.base import BaseExtractor
from embed_adblocker.schemas import ExtractedSource, ExtractionDebug
from embed_adblocker.utils.obfuscation import ObfuscationDecoder
from embed_adblocker.utils.url_filters import classify, is_blocked, is_video_source

logger = logging.getLogger(__name__)


class StaticExtractor(BaseExtractor):
    """Extracts stream URLs from the raw text of an embed page."""

    def __init__(self, request_headers: Optional[dict] = None, blocklist: Sequence[str] = AD_DOMAINS):
        super().__init__(request_headers)
        self.blocklist = blocklist
        self.blocked_urls = set()
        self.execution_time_ms = 0
        self._sources: List[ExtractedSource] = []
        # literal matches before resolution, used to prune repeated matches
        self._seen = set()
        self._resolved = set()

    async def extract(self, url: str, timeout_ms: int, **kwargs) -> List[ExtractedSource]:
        start = time.monotonic()
        logger.info(f"[Embed AdBlocker] Processing: {url}")
        try:
            response = await self._make_request(url, timeout_ms)
            html = response.text
            logger.info(f"[Embed AdBlocker] Fetched HTML ({len(html)} bytes)")
            return self.extract_from_html(html, url)
        finally:
            self.execution_time_ms = int((time.monotonic() - start) * 1000)
            logger.info(
                f"[Embed AdBlocker] Completed in {self.execution_time_ms}ms, found {len(self._sources)} sources"
            )

    def extract_from_html(self, html: str, base_url: str) -> List[ExtractedSource]:
        """Run the attribute, script variable and obfuscation scans over ``html``."""
        self._scan(html, base_url, URL_ATTRIBUTE_PATTERNS, record_non_video=True)
        self._scan(html, base_url, JS_VARIABLE_PATTERNS, record_non_video=False)

        decoder = ObfuscationDecoder(base_url, self.blocklist)
        for source in decoder.decode(html):
            if source.url in self._resolved:
                continue
            self._resolved.add(source.url)
            self._sources.append(source)
        self.blocked_urls.update(decoder.blocked)

        return list(self._sources)

    def _scan(self, html: str, base_url: str, patterns: Sequence[Pattern], record_non_video: bool) -> None:
        for pattern in patterns:
            for match in pattern.finditer(html):
                literal = match.group(1) if pattern.groups else match.group(0)
                if literal in self._seen:
                    continue
                if is_blocked(literal, self.blocklist):
                    logger.debug(f"[Blocked Ad] {literal}")
                    self.blocked_urls.add(literal)
                    continue
                if not is_video_source(literal):
                    # attribute scan remembers every non-ad URL it has looked at
                    if record_non_video:
                        self._seen.add(literal)
                    continue

                self._seen.add(literal)
                self._record(literal, base_url)

    def _record(self, literal: str, base_url: str) -> None:
        try:
            full_url = urljoin(base_url, literal)
        except ValueError:
            logger.debug(f"Skipping unresolvable URL: {literal}")
            return
        if full_url in self._resolved:
            return
        self._resolved.add(full_url)

        classification = classify(full_url)
        self._sources.append(ExtractedSource(url=full_url, type=classification.type, quality=classification.quality))
        logger.info(f"[Video Detected] {full_url}")

    def debug_info(self) -> ExtractionDebug:
        return ExtractionDebug(
            totalRequests=self.total_requests,
            blockedRequests=len(self.blocked_urls),
            detectedVideos=len(self._sources),
            executionTimeMs=self.execution_time_ms,
        )
