from __future__ import annotations

import logging
from dataclasses import dataclass, field
from urllib.parse import quote, urlencode

from mpwatch.core.config import settings
from mpwatch.models.documents import Document, DocumentOption, Pagination, SearchDocument
from mpwatch.services.cache.cache_keys import normalize_query
from mpwatch.services.documents.errors import BackendError
from mpwatch.services.documents.source import DocumentSource
from mpwatch.services.pagination import build_pagination, paginate_items, parse_page

logger = logging.getLogger(__name__)

MODE_ALL = "all"
MODE_SEARCH = "search"


@dataclass
class LibraryView:
    mode: str
    query: str
    documents: list[Document]
    pagination: Pagination
    options: list[DocumentOption] = field(default_factory=list)
    selected_ids: list[str] = field(default_factory=list)
    error: str | None = None

    @property
    def is_search(self) -> bool:
        return self.mode == MODE_SEARCH


def viewer_url(doc_id: str, term: str | None = None, page: int | None = None) -> str:
    """
    Deep link into the document viewer at a snippet's page and term.
    """
    params: dict[str, str | int] = {}
    if term:
        params["highlight"] = term
    if page:
        params["page"] = page

    base = f"/documents/{quote(doc_id, safe='')}"

    return f"{base}?{urlencode(params)}" if params else base


def library_url(query: str, page: int, document_ids: list[str] | None = None) -> str:
    params: list[tuple[str, str | int]] = []
    if query:
        params.append(("q", query))
    if page > 1:
        params.append(("page", page))
    for did in document_ids or []:
        params.append(("documentIds", did))

    return f"/research-library?{urlencode(params)}" if params else "/research-library"


def parse_document_ids(raw: list[str] | None) -> list[str]:
    """Accepts repeated params and comma-separated lists."""
    out: list[str] = []
    for item in raw or []:
        for did in item.split(","):
            did = did.strip()
            if did and did not in out:
                out.append(did)

    return out


async def _options(source: DocumentSource) -> list[DocumentOption]:
    try:
        return await source.list_options()
    except BackendError as e:
        logger.warning("document options unavailable: %s", e)
        return []


async def load_library(
    source: DocumentSource,
    *,
    query: str | None,
    page: int | str | None = 1,
    document_ids: list[str] | None = None,
    limit: int | None = None,
) -> LibraryView:
    """
    Empty query -> browse every document, paginated locally.
    Otherwise -> backend search for the requested page.
    Failures end in an empty view with an inline error, never an exception.
    Out-of-range pages are clamped to the last page.
    """
    limit = limit or settings.LIBRARY_PAGE_SIZE
    page = parse_page(page)
    q = normalize_query(query or "")[: settings.MAX_QUERY_CHARS]
    ids = document_ids or []
    options = await _options(source)
    empty = build_pagination(1, limit, 0)

    if not q:
        try:
            docs = await source.list_documents()
        except BackendError as e:
            logger.warning("document list failed: %s", e)
            return LibraryView(
                mode=MODE_ALL,
                query="",
                documents=[],
                pagination=empty,
                options=options,
                selected_ids=ids,
                error="Could not load documents. Please try again later.",
            )

        page_docs, pagination = paginate_items(docs, page, limit)

        return LibraryView(
            mode=MODE_ALL,
            query="",
            documents=page_docs,
            pagination=pagination,
            options=options,
            selected_ids=ids,
        )

    try:
        result = await source.search(q, page=page, limit=limit, document_ids=ids or None)
        last = result.pagination.total_pages
        if last and result.pagination.page > last:
            result = await source.search(q, page=last, limit=limit, document_ids=ids or None)
    except BackendError as e:
        logger.warning("search failed q=%r error=%s", q, e)
        return LibraryView(
            mode=MODE_SEARCH,
            query=q,
            documents=[],
            pagination=empty,
            options=options,
            selected_ids=ids,
            error="Search failed. Please try again later.",
        )

    docs: list[Document] = list(result.documents)

    return LibraryView(
        mode=MODE_SEARCH,
        query=q,
        documents=docs,
        pagination=result.pagination,
        options=options,
        selected_ids=ids,
    )


def snippet_links(doc: Document, term: str) -> list[tuple[str, str]]:
    """(snippet, viewer url) pairs for a search hit."""
    if not isinstance(doc, SearchDocument):
        return []

    return [(m.snippet, viewer_url(doc.id, term, m.page)) for m in doc.content_matches]
