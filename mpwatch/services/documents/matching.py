from __future__ import annotations

import re
from dataclasses import dataclass

from mpwatch.models.documents import ContentMatch
from mpwatch.services.highlight import contains_term, escape_term
from mpwatch.services.pagination import page_of_offset

WS_RE = re.compile(r"\s")

TITLE_MATCH_BOOST = 10.0


@dataclass(frozen=True)
class MatchSummary:
    title_match: bool
    content_matches: list[ContentMatch]
    total_matches: int
    relevance_score: float


def _snippet(content: str, start: int, end: int, radius: int) -> str:
    """
    Cut [start - radius, end + radius] and snap both edges to whitespace so
    no word is split. The match itself is always kept whole.
    """
    lo = max(0, start - radius)
    hi = min(len(content), end + radius)

    if lo > 0:
        ws = WS_RE.search(content, lo, start)
        if ws:
            lo = ws.end()
    if hi < len(content):
        tail = [m.start() for m in WS_RE.finditer(content, end, hi)]
        if tail:
            hi = tail[-1]

    text = content[lo:hi].strip()
    if lo > 0:
        text = "..." + text
    if hi < len(content):
        text = text + "..."

    return text


def match_document(
    title: str,
    content: str,
    term: str,
    *,
    radius: int,
    max_matches: int,
    words_per_page: int,
) -> MatchSummary:
    rx = re.compile(escape_term(term), re.IGNORECASE)
    hits = list(rx.finditer(content or ""))

    matches = [
        ContentMatch(
            snippet=_snippet(content, m.start(), m.end(), radius),
            page=page_of_offset(content, m.start(), words_per_page),
            position=m.start(),
        )
        for m in hits[:max_matches]
    ]

    title_match = contains_term(title, term)
    score = float(len(hits)) + (TITLE_MATCH_BOOST if title_match else 0.0)

    return MatchSummary(
        title_match=title_match,
        content_matches=matches,
        total_matches=len(hits),
        relevance_score=score,
    )
