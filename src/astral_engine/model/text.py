"""Text folding helpers shared by every engine component.

Names, titles, tags and user tokens are compared after *folding*:
``str.casefold``, Unicode NFD decomposition and removal of combining
marks.  So ``"Mañana"``, ``"MANANA"`` and ``"mañana"`` all fold to ``"manana"``.

``fold_with_map`` additionally returns, for every folded character, the
index of the original character it came from, which lets the search ranker
report highlight offsets in the *original* text even though matching runs
on the folded form.
"""
from __future__ import annotations

import re
import unicodedata
from typing import Final

_TAG_RE: Final[re.Pattern[str]] = re.compile(r"<[^>]*>")
_WS_RE: Final[re.Pattern[str]] = re.compile(r"\s+")


def _fold_char(ch: str) -> str:
    # casefold may emit combining marks (U+0130 -> "i\u0307"); strip after it.
    decomposed = unicodedata.normalize("NFD", ch.casefold())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def fold_text(text: str) -> str:
    """Return ``text`` lower-cased, accent-free and stripped of outer whitespace."""
    return "".join(_fold_char(ch) for ch in text).strip()


def fold_with_map(text: str) -> tuple[str, list[int]]:
    """Fold ``text`` without trimming and map folded indices to original ones.

    Returns
    -------
    tuple[str, list[int]]
        The folded string and a list whose ``i``-th entry is the index in
        ``text`` of the character that produced folded character ``i``.
    """
    folded: list[str] = []
    index_map: list[int] = []
    for idx, ch in enumerate(text):
        for out in _fold_char(ch):
            folded.append(out)
            index_map.append(idx)
    return "".join(folded), index_map


def strip_html(html: str) -> str:
    """Remove markup tags and collapse whitespace."""
    return _WS_RE.sub(" ", _TAG_RE.sub(" ", html)).strip()


def truncate(text: str, width: int, ellipsis: str = "…") -> str:
    """Shorten ``text`` to at most ``width`` characters plus ``ellipsis``."""
    if len(text) <= width:
        return text
    return text[:width].rstrip() + ellipsis
