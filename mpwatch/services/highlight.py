from __future__ import annotations

import html
import re
from dataclasses import dataclass


@dataclass(frozen=True)
class Segment:
    text: str
    is_match: bool


def escape_term(term: str) -> str:
    return re.escape(term)


def _term_regex(term: str | None) -> re.Pattern[str] | None:
    if not term or not term.strip():
        return None

    return re.compile(f"({escape_term(term)})", re.IGNORECASE)


def split_highlight(text: str, term: str | None) -> list[Segment]:
    """
    Split text on case-insensitive occurrences of term.

    The term is matched literally: regex metacharacters are escaped before
    the pattern is built. Joining the segment texts gives back the input.
    """
    text = text or ""
    rx = _term_regex(term)
    if rx is None:
        return [Segment(text=text, is_match=False)] if text else []

    # capturing group -> matches sit at odd indexes
    parts = rx.split(text)
    out: list[Segment] = []
    for i, part in enumerate(parts):
        if not part:
            continue
        out.append(Segment(text=part, is_match=i % 2 == 1))

    return out


def contains_term(text: str, term: str | None) -> bool:
    rx = _term_regex(term)
    if rx is None:
        return False

    return rx.search(text or "") is not None


def highlight_html(text: str, term: str | None, *, anchor_first: bool = False) -> str:
    """
    Render text as escaped HTML with matches wrapped in <mark>.
    With anchor_first the first mark gets id="first-highlight" (scroll target).
    """
    out: list[str] = []
    anchored = False
    attr = html.escape(term or "", quote=True)

    for seg in split_highlight(text, term):
        body = html.escape(seg.text)
        if not seg.is_match:
            out.append(body)
            continue

        if anchor_first and not anchored:
            out.append(f'<mark id="first-highlight" data-highlight="{attr}">{body}</mark>')
            anchored = True
        else:
            out.append(f'<mark data-highlight="{attr}">{body}</mark>')

    return "".join(out)
