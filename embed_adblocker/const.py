import re

# Substrings identifying ad and tracker infrastructure (matched case-insensitively).
AD_DOMAINS = (
    "doubleclick.net",
    "googlesyndication.com",
    "googleadservices.com",
    "adserve",
    "popads.net",
    "popcash.net",
    "propellerads.com",
    "exoclick.com",
    "adsterra.com",
    "clickadu.com",
    "bidvertiser.com",
    "trafficjunky.com",
    "juicyads.com",
    "ads-",
    "adservice",
    "analytics",
    "tracker",
    "/ads/",
    "/ad/",
    "banner",
    "popup",
    "redirect.php",
    "outbound",
)

VIDEO_PATTERNS = (
    re.compile(r"\.m3u8(\?|\Z)", re.IGNORECASE),
    re.compile(r"\.mp4(\?|\Z)", re.IGNORECASE),
    re.compile(r"\.mkv(\?|\Z)", re.IGNORECASE),
    re.compile(r"\.webm(\?|\Z)", re.IGNORECASE),
    re.compile(r"master\.m3u8", re.IGNORECASE),
    re.compile(r"playlist\.m3u8", re.IGNORECASE),
    re.compile(r"video\.(m3u8|mp4)", re.IGNORECASE),
)

HLS_PATTERN = re.compile(r"\.m3u8", re.IGNORECASE)
MP4_PATTERN = re.compile(r"\.mp4", re.IGNORECASE)
QUALITY_PATTERN = re.compile(r"(\d{3,4}p|hd|sd|fhd|uhd|4k)", re.IGNORECASE)

# Attribute and literal patterns, scanned first.
URL_ATTRIBUTE_PATTERNS = (
    re.compile(r"""(?:src|href|data-src|data-video|data-url|file)=["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r"""(?:source|video|stream):\s*["']([^"']+)["']""", re.IGNORECASE),
    re.compile(r'"(https?://[^"]+\.m3u8[^"]*)"', re.IGNORECASE),
    re.compile(r'"(https?://[^"]+\.mp4[^"]*)"', re.IGNORECASE),
    re.compile(r"""['"]file['"]:\s*['"]([^'"]+)['"]""", re.IGNORECASE),
    re.compile(r"""https?://[^\s<>"']+\.(?:m3u8|mp4)""", re.IGNORECASE),
)

# Player configuration assignments, scanned after the attribute patterns.
JS_VARIABLE_PATTERNS = (
    re.compile(
        r"""(?:videoSource|sourceUrl|streamUrl|playUrl|embedUrl|videoUrl|sources?|src)\s*[:=]\s*["']([^"']+\.(?:m3u8|mp4)[^"']*)["']""",
        re.IGNORECASE,
    ),
    re.compile(r"""var\s+\w+\s*=\s*["'](https?://[^"']+\.(?:m3u8|mp4)[^"']*)["']""", re.IGNORECASE),
    re.compile(r"""["']file["']\s*:\s*["']([^"']+\.(?:m3u8|mp4)[^"']*)["']""", re.IGNORECASE),
    re.compile(
        r"""sources?\s*:\s*\[?\s*{[^}]*["']src["']\s*:\s*["']([^"']+\.(?:m3u8|mp4)[^"']*)["']""", re.IGNORECASE
    ),
    re.compile(r"""player\.source\s*=\s*{[^}]*src:\s*["']([^"']+\.(?:m3u8|mp4)[^"']*)["']""", re.IGNORECASE),
    re.compile(r"""setup\(\s*{[^}]*file:\s*["']([^"']+\.(?:m3u8|mp4)[^"']*)["']""", re.IGNORECASE),
)

# Base64 payload candidates handed to the obfuscation decoder.
OBFUSCATED_PATTERNS = (
    re.compile(r"""atob\s*\(\s*["']([A-Za-z0-9+/=_-]+)["']\s*\)"""),
    re.compile(r"""btoa\s*\(\s*["']([^"']+)["']\s*\)"""),
    re.compile(r"""(?:const|var|let)\s+(?:datas?|playerData|videoData|config)\s*=\s*["']([A-Za-z0-9+/=_-]{50,})["']"""),
)

# Patterns applied to unpacked p.a.c.k.e.r. payloads.
PACKED_SOURCE_PATTERNS = (
    re.compile(r"""file\s*:\s*["']([^"']+)["']"""),
    re.compile(r"""https?://[^\s<>"'\\]+\.(?:m3u8|mp4)[^\s<>"'\\]*""", re.IGNORECASE),
)

JSON_VIDEO_KEYS = ("file", "url", "src", "source", "sources", "media", "video", "stream", "playlist")
JSON_NESTED_URL_KEYS = ("file", "src", "url")
JSON_QUALITY_KEYS = ("label", "quality")

DETECTOR_SCRIPT_PATTERN = re.compile(
    r"adblock|blockadblock|fuckadblock|detector|sandbox|frameElement|parent\.location", re.IGNORECASE
)
SCRIPT_BLOCK_PATTERN = re.compile(r"<script\b[^>]*>.*?(?:</script\b[^>]*>|\Z)", re.IGNORECASE | re.DOTALL)
DETECTOR_DIV_PATTERN = re.compile(
    r"""<div[^>]*class=["'][^"']*(?:adblock|blocked|disable)[^"']*["'][^>]*>.*?</div\s*>""",
    re.IGNORECASE | re.DOTALL,
)
REMOVED_MARKER = "<!-- anti-adblock removed -->"

BROWSER_HEADERS = {
    "accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "accept-language": "en-US,en;q=0.5",
}

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
}

FRAMING_HEADERS = {
    "X-Frame-Options": "ALLOWALL",
    "Content-Security-Policy": "frame-ancestors *; frame-src *",
}

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}
