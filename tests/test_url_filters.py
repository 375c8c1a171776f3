import pytest

from embed_adblocker.utils.url_filters import classify, extract_quality, get_video_type, is_blocked, is_video_source


@pytest.mark.parametrize(
    "url",
    [
        "https://ads.doubleclick.net/x.mp4",
        "https://pagead2.GOOGLESYNDICATION.com/pagead/show_ads.js",
        "https://cdn.example/ads/preroll.m3u8",
        "https://cdn.example/popup.html",
        "https://example.com/redirect.php?to=elsewhere",
        "https://metrics.example/tracker.js",
    ],
)
def test_blocklisted_urls_are_blocked(url):
    assert is_blocked(url)


@pytest.mark.parametrize(
    "url",
    [
        "https://cdn.example/master.m3u8",
        "https://host.example/streams/a.m3u8",
        "https://media.example/v/1/episode.mp4",
    ],
)
def test_plain_stream_urls_are_allowed(url):
    assert not is_blocked(url)


def test_is_blocked_is_deterministic():
    for url in ("https://ads.doubleclick.net/x.mp4", "https://cdn.example/master.m3u8", ""):
        assert is_blocked(url) == is_blocked(url)


def test_is_blocked_accepts_custom_blocklist():
    assert is_blocked("https://cdn.example/master.m3u8", blocklist=("cdn.example",))
    assert not is_blocked("https://ads.doubleclick.net/x.mp4", blocklist=())


@pytest.mark.parametrize(
    "url",
    [
        "https://x/a.m3u8",
        "https://x/a.m3u8?token=1",
        "https://x/a.MP4",
        "https://x/a.mkv",
        "https://x/a.webm?x=1",
        "https://x/hls/master.m3u8/segment",
        "https://x/playlist.m3u8#t",
    ],
)
def test_video_patterns(url):
    assert is_video_source(url)


@pytest.mark.parametrize("url", ["https://x/page.html", "https://x/a.mp4.html", "https://x/style.css"])
def test_non_video_urls(url):
    assert not is_video_source(url)


def test_hls_takes_priority_over_mp4():
    assert get_video_type("https://x/video.mp4/index.m3u8") == "hls"
    assert get_video_type("https://x/video.mp4") == "mp4"
    assert get_video_type("https://x/clip.webm") == "unknown"


def test_classify_quality_token():
    result = classify("https://x/video_1080p.mp4")
    assert result.is_video
    assert result.type == "mp4"
    assert result.quality == "1080p"


def test_classify_without_quality_token():
    result = classify("https://x/video.mp4")
    assert result.is_video
    assert result.type == "mp4"
    assert result.quality is None


def test_first_quality_token_wins():
    assert extract_quality("https://x/720p/video_1080p.m3u8") == "720p"
    assert extract_quality("https://x/FHD/video.m3u8") == "FHD"


def test_trailing_newline_is_not_an_extension_match():
    assert not is_video_source("https://x/a.mp4\n")
    assert not is_video_source("https://x/a.webm\n")
