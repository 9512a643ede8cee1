from __future__ import annotations

import logging
from dataclasses import dataclass

from mpwatch.core.config import settings
from mpwatch.models.documents import Document
from mpwatch.services.documents.errors import BackendError, DocumentNotFoundError
from mpwatch.services.documents.source import DocumentSource
from mpwatch.services.highlight import contains_term, highlight_html
from mpwatch.services.pagination import clamp_page, page_text, total_pages

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentPage:
    document: Document
    page: int
    total_pages: int
    text: str
    highlight: str | None

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_highlight(self) -> bool:
        # only the current slice is searched; a match on another page stays invisible
        return contains_term(self.text, self.highlight)

    def html(self) -> str:
        return highlight_html(self.text, self.highlight, anchor_first=True)


@dataclass(frozen=True)
class ViewerResult:
    page: DocumentPage | None = None
    not_found: bool = False
    error: str | None = None


def build_page(
    document: Document,
    page: int | str | None,
    highlight: str | None = None,
    per_page: int | None = None,
) -> DocumentPage:
    per_page = per_page or settings.WORDS_PER_PAGE
    pages = total_pages(document.content, per_page)
    current = clamp_page(page, pages)

    return DocumentPage(
        document=document,
        page=current,
        total_pages=max(pages, 1),
        text=page_text(document.content, current, per_page),
        highlight=(highlight or "").strip() or None,
    )


async def open_document(
    source: DocumentSource,
    doc_id: str,
    *,
    page: int | str | None = 1,
    highlight: str | None = None,
) -> ViewerResult:
    try:
        document = await source.get_document(doc_id)
    except DocumentNotFoundError:
        return ViewerResult(not_found=True, error="Document not found")
    except BackendError as e:
        logger.warning("document fetch failed doc_id=%s error=%s", doc_id, e)
        return ViewerResult(error="Failed to load document")

    return ViewerResult(page=build_page(document, page, highlight))
