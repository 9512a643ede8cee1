from __future__ import annotations

import bisect
import math
import re
from typing import Sequence, TypeVar

from mpwatch.core.config import settings
from mpwatch.models.documents import Pagination

WORD_RE = re.compile(r"\S+")

T = TypeVar("T")


def word_spans(content: str) -> list[tuple[int, int]]:
    return [m.span() for m in WORD_RE.finditer(content or "")]


def word_count(content: str) -> int:
    return len(word_spans(content))


def total_pages(content: str, per_page: int | None = None) -> int:
    per_page = per_page or settings.WORDS_PER_PAGE

    return math.ceil(word_count(content) / per_page)


def parse_page(page: int | str | None) -> int:
    """Requested page number as a positive int. Garbage input lands on page 1."""
    try:
        n = int(page) if page is not None else 1
    except (TypeError, ValueError):
        n = 1

    return max(1, n)


def clamp_page(page: int | str | None, total: int) -> int:
    """
    Clamp a requested page into [1, total].
    A document with no words still has one (empty) page.
    """
    return min(parse_page(page), max(total, 1))


def page_bounds(content: str, page: int, per_page: int | None = None) -> tuple[int, int]:
    """
    Character range [start, end) of page N.

    Pages are cut at word starts, so whitespace between two pages belongs to
    the earlier one and the first page keeps any leading whitespace. The
    concatenation of every page is the original content.
    """
    per_page = per_page or settings.WORDS_PER_PAGE
    content = content or ""
    spans = word_spans(content)

    first_word = (page - 1) * per_page
    next_word = page * per_page

    if page <= 1:
        start = 0
    elif first_word < len(spans):
        start = spans[first_word][0]
    else:
        start = len(content)

    end = spans[next_word][0] if next_word < len(spans) else len(content)

    return start, max(start, end)


def page_text(content: str, page: int, per_page: int | None = None) -> str:
    start, end = page_bounds(content, page, per_page)

    return (content or "")[start:end]


def page_of_offset(content: str, offset: int, per_page: int | None = None) -> int:
    """
    1-based page holding the character at offset. Uses the same word
    splitting as page_text so a deep link lands on the slice that shows it.
    """
    per_page = per_page or settings.WORDS_PER_PAGE
    starts = [s for s, _ in word_spans(content)]
    if not starts:
        return 1

    # index of the word that starts at or before offset
    idx = bisect.bisect_right(starts, offset) - 1

    return max(idx, 0) // per_page + 1


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    pages = math.ceil(total / limit) if limit > 0 else 0

    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )


def paginate_items(items: Sequence[T], page: int | str | None, limit: int) -> tuple[list[T], Pagination]:
    """
    Local pagination, used for browse-all mode and for legacy backend
    responses that return the whole result list at once.
    """
    limit = max(1, limit)
    pages = math.ceil(len(items) / limit)
    page = clamp_page(page, pages)
    start = (page - 1) * limit

    return list(items[start : start + limit]), build_pagination(page, limit, len(items))
