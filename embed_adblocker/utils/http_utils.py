import ssl
from urllib.parse import urlparse

import httpx

from embed_adblocker.configs import settings


class FetchError(Exception):
    def __init__(self, status_code, message):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


DEFAULT_SSL_CONTEXT = ssl.create_default_context()


def create_httpx_client(follow_redirects: bool = True, **kwargs) -> httpx.AsyncClient:
    """
    Create an HTTPX AsyncClient configured from the transport settings.

    Args:
        follow_redirects (bool): Whether to follow 3xx redirects automatically.
        **kwargs: Additional AsyncClient keyword arguments.

    Returns:
        httpx.AsyncClient: Configured client.
    """
    mounts = settings.transport_config.get_mounts()
    verify = DEFAULT_SSL_CONTEXT if not settings.transport_config.disable_ssl_verification_globally else False
    return httpx.AsyncClient(
        mounts=mounts,
        follow_redirects=follow_redirects,
        verify=verify,
        **kwargs,
    )


DEFAULT_PORTS = {"http": 80, "https": 443}


def get_origin(url: str) -> str:
    """Return the scheme://host[:port] origin of an absolute URL, without userinfo or a default port."""
    parsed = urlparse(url)
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = parsed.port
    if port is not None and port != DEFAULT_PORTS.get(parsed.scheme):
        host = f"{host}:{port}"
    return f"{parsed.scheme}://{host}"


def is_absolute_http_url(url: str) -> bool:
    """Accept only http(s) URLs with a host, a valid port and no whitespace or control characters."""
    if any(char.isspace() or ord(char) < 0x20 or ord(char) == 0x7F for char in url):
        return False
    try:
        parsed = urlparse(url)
        # raises ValueError when out of range or not numeric
        parsed.port
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.hostname)
