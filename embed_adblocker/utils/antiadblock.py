"""
Neutralization of anti-adblock logic in fetched embed pages.

This is best effort: it raises the cost of detection, it does not guarantee
every detector is defeated.
"""

import logging
import re
from typing import Sequence

from embed_adblocker.const import (
    AD_DOMAINS,
    DETECTOR_DIV_PATTERN,
    DETECTOR_SCRIPT_PATTERN,
    REMOVED_MARKER,
    SCRIPT_BLOCK_PATTERN,
)
from embed_adblocker.utils.assets import js_literal, render_asset

logger = logging.getLogger(__name__)

_BODY_CLOSE = re.compile(r"</body\s*>", re.IGNORECASE)


def strip_detectors(html: str) -> str:
    """
    Replace detector scripts and "disable your adblocker" notices with a comment marker.

    Each ``<script>`` element is examined on its own, tag attributes included, so
    unrelated scripts next to a detector survive. An unclosed trailing script is
    treated as running to the end of the document.
    """
    def replace_script(match: re.Match) -> str:
        nonlocal removed
        if DETECTOR_SCRIPT_PATTERN.search(match.group(0)):
            removed += 1
            return REMOVED_MARKER
        return match.group(0)

    # notices go first so a marker landing inside a script gets that script removed too
    modified, removed = DETECTOR_DIV_PATTERN.subn(REMOVED_MARKER, html)
    modified = SCRIPT_BLOCK_PATTERN.sub(replace_script, modified)

    if removed:
        logger.info(f"[Bypass] Removed {removed} anti-adblock blocks")
    return modified


def build_counter_shim(blocklist: Sequence[str] = AD_DOMAINS) -> str:
    script = render_asset("counter_shim.js", ad_domains=js_literal(list(blocklist)))
    return f'<script id="embed-shield">\n{script}</script>\n'


def inject_counter_shim(html: str, blocklist: Sequence[str] = AD_DOMAINS) -> str:
    """Insert the fake ad presence shim before ``</body>``, or append it."""
    shim = build_counter_shim(blocklist)
    modified, count = _BODY_CLOSE.subn(lambda m: shim + m.group(0), html, count=1)
    return modified if count else html + shim


def bypass_anti_adblock(html: str, inject_shim: bool = True) -> str:
    modified = strip_detectors(html)
    if inject_shim:
        modified = inject_counter_shim(modified)
    return modified
