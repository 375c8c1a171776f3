"""
URL classification helpers.

``is_blocked`` decides whether a URL belongs to ad or tracking infrastructure,
``classify`` decides whether it points at a stream and which kind. Both are pure
functions over the static tables in :mod:`embed_adblocker.const`.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Pattern

from embed_adblocker.const import AD_DOMAINS, VIDEO_PATTERNS, HLS_PATTERN, MP4_PATTERN, QUALITY_PATTERN
from embed_adblocker.schemas import VideoType


@dataclass(frozen=True)
class VideoClassification:
    is_video: bool
    type: VideoType
    quality: Optional[str] = None


def is_blocked(url: str, blocklist: Sequence[str] = AD_DOMAINS) -> bool:
    """
    Check whether a URL matches the ad/tracker blocklist.

    Args:
        url (str): The URL to check.
        blocklist (Sequence[str]): Lowercase domain and path fragments.

    Returns:
        bool: True if any fragment occurs in the URL, ignoring case.
    """
    lower_url = url.lower()
    return any(fragment in lower_url for fragment in blocklist)


def is_video_source(url: str, patterns: Sequence[Pattern] = VIDEO_PATTERNS) -> bool:
    return any(pattern.search(url) for pattern in patterns)


def get_video_type(url: str) -> VideoType:
    # HLS wins over MP4 when both occur
    if HLS_PATTERN.search(url):
        return "hls"
    if MP4_PATTERN.search(url):
        return "mp4"
    return "unknown"


def extract_quality(url: str) -> Optional[str]:
    match = QUALITY_PATTERN.search(url)
    return match.group(1) if match else None


def classify(url: str) -> VideoClassification:
    """Classify a URL as a stream and extract its type and quality token."""
    return VideoClassification(
        is_video=is_video_source(url),
        type=get_video_type(url),
        quality=extract_quality(url),
    )
