"""
One-to-one text normalization for matching.

Every character of the input maps to exactly one character of the output, so
offsets computed on normalized text are valid offsets in the original text.
Normalized text is only used for matching decisions and never handed back to
callers.
"""

import re
import unicodedata
from functools import lru_cache

_WS_RE = re.compile(r"\s+")

# Typographic punctuation that NFKD leaves alone or expands to several characters.
PUNCTUATION_MAP = {
    "\u2018": "'",  # left single quotation mark
    "\u2019": "'",  # right single quotation mark
    "\u201a": "'",  # single low-9 quotation mark
    "\u201b": "'",  # single high-reversed-9 quotation mark
    "\u2032": "'",  # prime
    "\u00b4": "'",  # acute accent
    "\u2039": "'",  # single left-pointing angle quotation mark
    "\u203a": "'",  # single right-pointing angle quotation mark
    "\u201c": '"',  # left double quotation mark
    "\u201d": '"',  # right double quotation mark
    "\u201e": '"',  # double low-9 quotation mark
    "\u201f": '"',  # double high-reversed-9 quotation mark
    "\u2033": '"',  # double prime
    "\u00ab": '"',  # left-pointing double angle quotation mark
    "\u00bb": '"',  # right-pointing double angle quotation mark
    "\u2010": "-",  # hyphen
    "\u2011": "-",  # non-breaking hyphen
    "\u2012": "-",  # figure dash
    "\u2013": "-",  # en dash
    "\u2014": "-",  # em dash
    "\u2015": "-",  # horizontal bar
    "\u2212": "-",  # minus sign
    "\u00ad": "-",  # soft hyphen
    "\u2026": ".",  # horizontal ellipsis
}


@lru_cache(maxsize=8192)
def normalize_char(c: str) -> str:
    """
    Map a single character onto its canonical matching representative.

    Args:
        c: A single character

    Returns:
        Exactly one character
    """
    if c.isspace():
        return " "
    mapped = PUNCTUATION_MAP.get(c)
    if mapped is not None:
        return mapped
    if unicodedata.category(c) == "Cc":
        return " "
    if c.isascii():
        return c
    base = "".join(
        ch for ch in unicodedata.normalize("NFKD", c) if not unicodedata.combining(ch)
    )
    if len(base) == 1 and not base.isspace():
        return base
    # No single-character representative (ligatures, unassigned, marks): keep it.
    return c


def normalize(text: str) -> str:
    """
    Normalize text one-to-one: accented letters become base letters, typographic
    quotes and dashes become ASCII, whitespace and control characters become
    spaces.

    Args:
        text: The original text

    Returns:
        A string of the same length as text
    """
    return "".join(map(normalize_char, text))


def collapse_whitespace(text: str) -> str:
    """Replace every whitespace run by a single space."""
    return _WS_RE.sub(" ", text)
