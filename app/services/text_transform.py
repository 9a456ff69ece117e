"""The processing step applied to every job's text."""

from __future__ import annotations


def transform_text(text: str) -> str:
    """Return the uppercase transliteration of ``text``.

    Uses Python's full Unicode case mapping, so characters such as ``ß`` expand
    to more than one code point (``"SS"``).
    """
    return text.upper()
