import base64
import binascii
import logging
from typing import Optional

logger = logging.getLogger(__name__)

BASE64_CHARS = frozenset("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/=-_")


def is_base64_candidate(value: str) -> bool:
    """
    Check if a string could be a base64 payload.

    Args:
        value (str): The string to check.

    Returns:
        bool: True if the string only holds (URL-safe) base64 characters and is long enough to matter.
    """
    if len(value) < 8:
        return False
    return set(value).issubset(BASE64_CHARS)


def decode_base64_text(encoded: str) -> Optional[str]:
    """
    Decode a base64 string into UTF-8 text.

    Args:
        encoded (str): The base64 (standard or URL-safe, padded or not) string.

    Returns:
        Optional[str]: The decoded text if successful, None if decoding fails.
    """
    if not is_base64_candidate(encoded):
        return None

    try:
        # Handle URL-safe base64 encoding (replace - with + and _ with /)
        normalized = encoded.replace("-", "+").replace("_", "/").rstrip("=")

        missing_padding = len(normalized) % 4
        if missing_padding == 1:
            return None
        if missing_padding:
            normalized += "=" * (4 - missing_padding)

        return base64.b64decode(normalized, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        logger.debug(f"Failed to decode base64 payload '{encoded[:50]}...': {e}")
        return None
