"""
Recovery of stream URLs hidden in obfuscated script payloads.

Embed hosts commonly hide the player source behind ``atob("...")`` calls,
long base64 constants assigned to ``data``/``config``-style variables, or a
p.a.c.k.e.r. ``eval`` wrapper. Decoded payloads are either a URL, or JSON whose
known keys hold one of three shapes:

* a string URL,
* an object with a nested ``file``/``src``/``url`` string,
* a list of either of the above.

Anything else is skipped. A failing candidate never aborts the scan.
"""

import json
import logging
from typing import Any, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from embed_adblocker.const import (
    AD_DOMAINS,
    JSON_NESTED_URL_KEYS,
    JSON_QUALITY_KEYS,
    JSON_VIDEO_KEYS,
    OBFUSCATED_PATTERNS,
    PACKED_SOURCE_PATTERNS,
)
from embed_adblocker.schemas import ExtractedSource
from embed_adblocker.utils.base64_utils import decode_base64_text
from embed_adblocker.utils.packed import unpack_scripts
from embed_adblocker.utils.url_filters import classify, is_blocked, is_video_source

logger = logging.getLogger(__name__)

# (url, companion quality label)
Candidate = Tuple[str, Optional[str]]


def _nested_url(value: dict) -> Optional[str]:
    for key in JSON_NESTED_URL_KEYS:
        nested = value.get(key)
        if isinstance(nested, str) and nested:
            return nested
    return None


def _companion_quality(value: dict) -> Optional[str]:
    for key in JSON_QUALITY_KEYS:
        label = value.get(key)
        if isinstance(label, (str, int)) and not isinstance(label, bool) and str(label):
            return str(label)
    return None


def iter_json_candidates(payload: Any) -> Iterator[Candidate]:
    """Yield URLs found under the known video keys of a decoded JSON object."""
    if not isinstance(payload, dict):
        return

    for key in JSON_VIDEO_KEYS:
        value = payload.get(key)
        if not value:
            continue
        if isinstance(value, str):
            yield value, None
        elif isinstance(value, dict):
            nested = _nested_url(value)
            if nested:
                yield nested, None
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, str):
                    yield item, None
                elif isinstance(item, dict):
                    nested = _nested_url(item)
                    if nested:
                        yield nested, _companion_quality(item)


class ObfuscationDecoder:
    """Decodes obfuscated payloads of one document.

    ``blocked`` holds decoded URLs dropped by the ad/tracker blocklist.
    """

    def __init__(self, base_url: str, blocklist: Sequence[str] = AD_DOMAINS):
        self.base_url = base_url
        self.blocklist = blocklist
        self.blocked = set()
        self._sources: List[ExtractedSource] = []
        self._seen = set()

    def decode(self, text: str) -> List[ExtractedSource]:
        for pattern in OBFUSCATED_PATTERNS:
            for match in pattern.finditer(text):
                self._decode_candidate(match.group(1))

        for unpacked in unpack_scripts(text):
            logger.debug(f"[Unpacked Script] {unpacked[:200]}...")
            for pattern in PACKED_SOURCE_PATTERNS:
                for match in pattern.finditer(unpacked):
                    self._record(match.group(1) if pattern.groups else match.group(0), None)

        return list(self._sources)

    def _decode_candidate(self, token: str) -> None:
        decoded = decode_base64_text(token)
        if decoded is None:
            return
        decoded = decoded.strip()
        logger.debug(f"[Decoded Data] {decoded[:200]}...")

        if is_video_source(decoded):
            self._record(decoded, None)
            return

        try:
            payload = json.loads(decoded)
        except (ValueError, RecursionError):
            return

        for url, label in iter_json_candidates(payload):
            self._record(url, label)

    def _record(self, url: str, label: Optional[str]) -> None:
        if not is_video_source(url):
            return
        if is_blocked(url, self.blocklist):
            logger.debug(f"[Blocked Ad] {url}")
            self.blocked.add(url)
            return

        try:
            full_url = urljoin(self.base_url, url)
        except ValueError:
            return
        if full_url in self._seen:
            return
        self._seen.add(full_url)

        classification = classify(full_url)
        self._sources.append(
            ExtractedSource(url=full_url, type=classification.type, quality=classification.quality or label)
        )
        logger.info(f"[Video Decoded] {full_url}")


def decode(text: str, base_url: str) -> List[ExtractedSource]:
    """
    Recover stream URLs from the obfuscated payloads of ``text``.

    Args:
        text (str): Raw HTML or script text.
        base_url (str): URL relative references are resolved against.

    Returns:
        List[ExtractedSource]: Decoded sources in discovery order. Never raises for bad payloads.
    """
    return ObfuscationDecoder(base_url).decode(text)
