import pytest

from embed_adblocker.const import DETECTOR_SCRIPT_PATTERN, REMOVED_MARKER, SCRIPT_BLOCK_PATTERN
from embed_adblocker.extractors.proxy import (
    ProxyRewriter,
    build_error_document,
    build_extractor_script,
    build_wrapper_document,
    inject_extractor_script,
)
from embed_adblocker.utils.antiadblock import bypass_anti_adblock, build_counter_shim, inject_counter_shim, strip_detectors
from embed_adblocker.utils.http_utils import FetchError

HOSTILE_PAGE = """<!DOCTYPE html>
<html>
<head>
  <script src="/js/player.js"></script>
  <script>if (typeof blockAdBlock === 'undefined') { location.href = '/blocked'; }</script>
  <SCRIPT type="text/javascript">if (window.frameElement) { window.top.location = 'https://spam.example'; }</SCRIPT>
  <script src="https://cdn.example/fuckadblock.js"></script>
  <script>var player = jwplayer("p"); var sandboxed = false;</script>
  <script>var title = "Episode 1";</script>
</head>
<body>
  <div class="notice adblock-warning"><p>Please disable AdBlock</p></div>
  <div class="player"><video src="https://cdn.example/ep1.m3u8"></video></div>
  <script>if (parent.location !== location) { document.body.innerHTML = ''; }
</body>
</html>"""


def live_scripts(html: str):
    return [match.group(0) for match in SCRIPT_BLOCK_PATTERN.finditer(html)]


def test_strip_detectors_replaces_each_detector_with_marker():
    stripped = strip_detectors(HOSTILE_PAGE)

    assert stripped.count(REMOVED_MARKER) == 6
    assert '<script src="/js/player.js"></script>' in stripped
    assert '<script>var title = "Episode 1";</script>' in stripped
    assert '<div class="player"><video src="https://cdn.example/ep1.m3u8"></video></div>' in stripped
    assert "Please disable" not in stripped


def test_neighbouring_scripts_survive():
    html = "<script>var a = 1;</script><p>text</p><script>detectAdblock();</script><script>var b = 2;</script>"

    assert strip_detectors(html) == (
        "<script>var a = 1;</script><p>text</p>" + REMOVED_MARKER + "<script>var b = 2;</script>"
    )


def test_notice_marker_inside_a_script_removes_that_script():
    html = """<script>var tpl = '<div class="blocked">x</div>'; render(tpl);</script>"""

    stripped = strip_detectors(html)

    assert live_scripts(stripped) == []


def test_counter_shim_is_free_of_detector_signatures():
    shim = build_counter_shim()

    assert DETECTOR_SCRIPT_PATTERN.search(shim) is None
    assert "doubleclick.net" in shim
    assert "__AD_DOMAINS__" not in shim


def test_extractor_script_is_free_of_detector_signatures():
    script = build_extractor_script(poll_interval_ms=250, max_attempts=10)

    assert DETECTOR_SCRIPT_PATTERN.search(script) is None
    assert "VIDEO_EXTRACTED" in script
    assert "EXTRACTION_FAILED" in script
    assert "var POLL_INTERVAL_MS = 250;" in script
    assert "var MAX_ATTEMPTS = 10;" in script


def test_counter_shim_goes_before_body_close_or_is_appended():
    result = inject_counter_shim("<html><body><p>x</p></BODY></html>")

    assert result.startswith('<html><body><p>x</p><script id="embed-shield">')
    assert result.endswith("</BODY></html>")
    assert inject_counter_shim("<p>fragment</p>").startswith("<p>fragment</p><script")


@pytest.mark.parametrize(
    "page, marker",
    [
        ("<html><head><title>t</title></head><body></body></html>", "</head>"),
        ("<html><body><p>no head</p></body></html>", "</body>"),
    ],
)
def test_extractor_injection_point(page, marker):
    script = build_extractor_script()

    result = inject_extractor_script(page, script)

    assert result.index(script) + len(script) == result.index(marker)


def test_extractor_appended_when_document_has_no_closing_tags():
    script = build_extractor_script()

    assert inject_extractor_script("<video></video>", script) == "<video></video>" + script


def test_rewritten_document_has_no_live_detector_scripts():
    rewritten = inject_extractor_script(bypass_anti_adblock(HOSTILE_PAGE), build_extractor_script())

    for script in live_scripts(rewritten):
        assert DETECTOR_SCRIPT_PATTERN.search(script) is None, script
    assert 'id="embed-extractor"' in rewritten
    assert 'id="embed-shield"' in rewritten


def test_counter_shim_can_be_disabled():
    assert 'id="embed-shield"' not in bypass_anti_adblock(HOSTILE_PAGE, inject_shim=False)


@pytest.mark.asyncio
async def test_proxy_rewriter_returns_framable_uncached_document(html_page):
    html_page(HOSTILE_PAGE)

    document = await ProxyRewriter().extract("https://embed.example/v/1", 30000)

    assert document.headers["Content-Type"] == "text/html; charset=utf-8"
    assert document.headers["X-Frame-Options"] == "ALLOWALL"
    assert "frame-ancestors *" in document.headers["Content-Security-Policy"]
    assert document.headers["Cache-Control"] == "no-cache, no-store, must-revalidate"
    assert document.html.index('id="embed-extractor"') < document.html.index("</head>")
    for script in live_scripts(document.html):
        assert DETECTOR_SCRIPT_PATTERN.search(script) is None


@pytest.mark.asyncio
async def test_proxy_rewriter_propagates_fetch_errors(html_page):
    html_page("gone", status_code=404)

    with pytest.raises(FetchError):
        await ProxyRewriter().extract("https://embed.example/v/1", 30000)


def test_wrapper_document_escapes_the_embed_url():
    document = build_wrapper_document('https://embed.example/v/1?a=1&b="><script>alert(1)</script>')

    assert 'src="https://embed.example/v/1?a=1&amp;b=&quot;&gt;&lt;script&gt;alert(1)&lt;/script&gt;"' in document.html
    assert "<script>alert(1)" not in document.html
    assert document.headers["X-Embed-Mode"] == "degraded-wrapper"
    assert document.headers["X-Frame-Options"] == "ALLOWALL"


def test_error_document_escapes_message():
    assert "&lt;b&gt;" in build_error_document("<b>HTTP 500</b>")

