"""Unpacker for Dean Edward's p.a.c.k.e.r, as used by many embed hosts to hide player setup code.

Based on the js-beautify unpacker by Einar Lielmanis and Stefano Sanfilippo.
"""

import logging
import re
from typing import List

from bs4 import BeautifulSoup, SoupStrainer

logger = logging.getLogger(__name__)

PACKER_SIGNATURE = "eval(function(p,a,c,k,e,d)"

_ARG_PATTERNS = (
    re.compile(r"}\('(.*)', *(\d+|\[\]), *(\d+), *'(.*)'\.split\('\|'\), *(\d+), *(.*)\)\)", re.DOTALL),
    re.compile(r"}\('(.*)', *(\d+|\[\]), *(\d+), *'(.*)'\.split\('\|'\)", re.DOTALL),
)


class UnpackingError(Exception):
    """Badly packed source or general error."""
    pass


def detect(source: str) -> bool:
    return PACKER_SIGNATURE in source.replace(" ", "")


def unpack(source: str) -> str:
    """Unpacks P.A.C.K.E.R. packed js code."""
    payload, symtab, radix, count = _filterargs(source)

    if count != len(symtab):
        raise UnpackingError("Malformed p.a.c.k.e.r. symtab.")

    try:
        unbase = Unbaser(radix)
    except TypeError:
        raise UnpackingError("Unknown p.a.c.k.e.r. encoding.")

    def lookup(match):
        word = match.group(0)
        try:
            return symtab[unbase(word)] or word
        except (IndexError, KeyError, ValueError):
            return word

    payload = payload.replace("\\\\", "\\").replace("\\'", "'")
    return re.sub(r"\b\w+\b", lookup, payload)


def _filterargs(source: str):
    for pattern in _ARG_PATTERNS:
        args = pattern.search(source)
        if args:
            payload, radix, count, symtab = args.group(1), args.group(2), args.group(3), args.group(4)
            try:
                return payload, symtab.split("|"), 62 if radix == "[]" else int(radix), int(count)
            except ValueError:
                raise UnpackingError("Corrupted p.a.c.k.e.r. data.")

    raise UnpackingError("Could not make sense of p.a.c.k.e.r data (unexpected code structure)")


class Unbaser:
    """Converts strings in a given base to natural numbers."""

    ALPHABET_62 = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    ALPHABET_95 = (
        " !\"#$%&'()*+,-./0123456789:;<=>?@ABCDEFGHIJKLMNOPQRSTUVWXYZ"
        "[\\]^_`abcdefghijklmnopqrstuvwxyz{|}~"
    )

    def __init__(self, base: int):
        self.base = base

        # int() handles up to base 36 itself
        if 2 <= base <= 36:
            self.dictionary = None
            return

        if base <= 62:
            alphabet = self.ALPHABET_62[:base]
        elif base == 95:
            alphabet = self.ALPHABET_95
        else:
            raise TypeError("Unsupported base encoding.")
        self.dictionary = {cipher: index for index, cipher in enumerate(alphabet)}

    def __call__(self, string: str) -> int:
        if self.dictionary is None:
            return int(string, self.base)
        ret = 0
        for index, cipher in enumerate(string[::-1]):
            ret += (self.base**index) * self.dictionary[cipher]
        return ret


def unpack_scripts(html: str) -> List[str]:
    """
    Unpack every packed ``<script>`` in an HTML document.

    Scripts that fail to unpack are skipped.
    """
    if PACKER_SIGNATURE not in html.replace(" ", ""):
        return []

    unpacked = []
    soup = BeautifulSoup(html, "lxml", parse_only=SoupStrainer("script"))
    for script in soup.find_all("script"):
        code = script.get_text()
        if not detect(code):
            continue
        try:
            unpacked.append(unpack(code))
        except UnpackingError as e:
            logger.debug(f"Skipping packed script: {e}")
    return unpacked
