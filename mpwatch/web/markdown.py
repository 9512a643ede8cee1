import html
import re
from typing import Iterable

from mpwatch.services.chapters import slugify, unique_slug

HEADING_RE = re.compile(r"^(#{1,6})\s+(.*)$")
ORDERED_RE = re.compile(r"^\d+\.\s+")
LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
SAFE_HREF_RE = re.compile(r"^(https?://|/|#|mailto:)", re.IGNORECASE)


def is_safe_href(href: str | None) -> bool:
    return bool(href) and SAFE_HREF_RE.match(href.strip()) is not None


def _link(m: re.Match[str]) -> str:
    # label and href are already escaped by _inline
    label, href = m.group(1), m.group(2)
    if not is_safe_href(html.unescape(href)):
        return label

    return f'<a href="{href}">{label}</a>'


def _inline(text: str) -> str:
    text = html.escape(text)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"\*(.+?)\*", r"<em>\1</em>", text)
    text = re.sub(r"`(.+?)`", r"<code>\1</code>", text)
    text = LINK_RE.sub(_link, text)

    return text


def _heading_text(m: re.Match[str]) -> str:
    # "## Title ##" closing hashes are optional
    return m.group(2).strip().rstrip("#").strip()


def first_heading_id(md: str) -> str | None:
    """Slug of the heading that opens the document, if it opens with one."""
    for raw in (md or "").splitlines():
        stripped = raw.strip()
        if not stripped:
            continue
        heading = HEADING_RE.match(stripped)
        if heading is None:
            return None
        return slugify(_heading_text(heading)) or None

    return None


def markdown_to_html(md: str, reserved_ids: Iterable[str] = ()) -> str:
    """
    Markdown subset used by the whitepaper chapters: headings (with slug
    ids), paragraphs, lists, blockquotes, rules, emphasis, code and links.

    Heading ids are unique within the output and never reuse reserved_ids.
    """
    out: list[str] = []
    taken: set[str] = set(reserved_ids)
    paragraph: list[str] = []
    list_tag: str | None = None
    in_blockquote = False

    def flush_paragraph() -> None:
        if paragraph:
            out.append(f"<p>{_inline(' '.join(paragraph))}</p>")
            paragraph.clear()

    def close_blocks() -> None:
        nonlocal list_tag, in_blockquote
        flush_paragraph()
        if list_tag:
            out.append(f"</{list_tag}>")
            list_tag = None
        if in_blockquote:
            out.append("</blockquote>")
            in_blockquote = False

    for raw in (md or "").splitlines():
        line = raw.rstrip()
        stripped = line.strip()

        heading = HEADING_RE.match(stripped)
        if heading:
            close_blocks()
            level = len(heading.group(1))
            text = _heading_text(heading)
            heading_id = unique_slug(slugify(text) or "section", taken)
            out.append(f'<h{level} id="{heading_id}">{_inline(text)}</h{level}>')
            continue

        if stripped in ("---", "***", "___"):
            close_blocks()
            out.append("<hr>")
            continue

        if stripped.startswith("> ") or stripped == ">":
            flush_paragraph()
            if list_tag:
                out.append(f"</{list_tag}>")
                list_tag = None
            if not in_blockquote:
                out.append("<blockquote>")
                in_blockquote = True
            out.append(f"<p>{_inline(stripped[1:].strip())}</p>")
            continue

        if stripped.startswith(("- ", "* ")) or ORDERED_RE.match(stripped):
            flush_paragraph()
            tag = "ul" if stripped[0] in "-*" else "ol"
            if list_tag != tag:
                if list_tag:
                    out.append(f"</{list_tag}>")
                out.append(f"<{tag}>")
                list_tag = tag
            item = stripped[2:] if tag == "ul" else ORDERED_RE.sub("", stripped)
            out.append(f"<li>{_inline(item)}</li>")
            continue

        if not stripped:
            close_blocks()
            continue

        if list_tag or in_blockquote:
            close_blocks()
        paragraph.append(stripped)

    close_blocks()

    return "\n".join(out)
