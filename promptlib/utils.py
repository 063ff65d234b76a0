"""Small helpers shared across promptlib."""

import os
import re
import unicodedata
from pathlib import Path

_COMBINING_MARKS = re.compile("[\u0300-\u036f]")
_NON_SLUG_RUN = re.compile(r"[^a-z0-9]+")
_LEADING_FLOAT = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

_UINT32 = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def get_promptlib_home() -> Path:
    """Directory for credentials and logs (``$PROMPTLIB_DATA_DIR`` or ``~/.promptlib``)."""
    custom = os.environ.get("PROMPTLIB_DATA_DIR")
    if custom:
        return Path(custom).expanduser()
    return Path.home() / ".promptlib"


def slugify(text: str) -> str:
    """Turn a display name into a URL slug.

    Lowercases, strips diacritics, collapses every run of characters outside
    ``[a-z0-9]`` into a single hyphen and trims hyphens from both ends:

    >>> slugify("Refrão - Intensidade")
    'refrao-intensidade'
    """
    lowered = unicodedata.normalize("NFD", text.lower())
    lowered = _COMBINING_MARKS.sub("", lowered)
    return _NON_SLUG_RUN.sub("-", lowered).strip("-")


def js_string_hash(text: str) -> int:
    """32-bit signed rolling hash of ``text``: ``h = (h * 31 + unit) | 0``.

    Iterates UTF-16 code units (characters outside the BMP contribute both
    surrogates), so the result matches hashes previously computed by the
    browser client for the same content.
    """
    data = text.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & _UINT32
    if h & _INT32_SIGN:
        h -= 1 << 32
    return h


def utf16_prefix(text: str, max_units: int) -> str:
    """First ``max_units`` UTF-16 code units of ``text``, as a browser slices strings.

    A character outside the BMP counts as two units. One that would be cut in
    half is dropped whole.
    """
    units = 0
    for i, char in enumerate(text):
        units += 2 if ord(char) > 0xFFFF else 1
        if units > max_units:
            return text[:i]
    return text


def parse_leading_float(text: str) -> float:
    """Parse the numeric prefix of ``text`` (``"4.5 stars"`` -> 4.5).

    Empty or non-numeric input yields 0.0.
    """
    if not text:
        return 0.0
    match = _LEADING_FLOAT.match(text)
    if not match:
        return 0.0
    try:
        value = float(match.group(1))
    except ValueError:
        return 0.0
    if value != value or value in (float("inf"), float("-inf")):
        return 0.0
    return value


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
