from __future__ import annotations

import asyncio
import json
import logging

from pydantic import ValidationError

from mpwatch.core.config import settings
from mpwatch.models.documents import Document, DocumentOption, SearchDocument, SearchResult
from mpwatch.services.cache.cache_keys import normalize_query
from mpwatch.services.documents.errors import DocumentNotFoundError
from mpwatch.services.documents.matching import match_document
from mpwatch.services.pagination import paginate_items
from mpwatch.storage.documents import list_document_ids, read_document

logger = logging.getLogger(__name__)


def _load_all() -> list[Document]:
    out: list[Document] = []
    for doc_id in list_document_ids():
        try:
            out.append(Document.model_validate(read_document(doc_id)))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            # one broken file must not hide the rest of the library
            logger.warning("skipping unreadable document doc_id=%s error=%s", doc_id, e)

    out.sort(key=lambda d: d.created_at or "", reverse=True)

    return out


def _load_one(doc_id: str) -> Document:
    try:
        return Document.model_validate(read_document(doc_id))
    except FileNotFoundError:
        raise DocumentNotFoundError(doc_id)


class LocalDocumentSource:
    """
    Read-only document library kept on disk under DATA_DIR/documents.

    Search is a literal, case-insensitive keyword match. Match pages come from
    the same word splitting the document viewer uses.
    """

    async def list_documents(self) -> list[Document]:
        return await asyncio.to_thread(_load_all)

    async def list_options(self) -> list[DocumentOption]:
        docs = await self.list_documents()

        return [DocumentOption(id=d.id, title=d.title, file_type=d.file_type) for d in docs]

    async def search(
        self,
        query: str,
        *,
        page: int = 1,
        limit: int = 10,
        document_ids: list[str] | None = None,
    ) -> SearchResult:
        q = normalize_query(query)
        docs = await self.list_documents()

        if document_ids:
            wanted = set(document_ids)
            docs = [d for d in docs if d.id in wanted]

        hits: list[SearchDocument] = []
        if q:
            for d in docs:
                summary = match_document(
                    d.title,
                    d.content,
                    q,
                    radius=settings.SNIPPET_RADIUS_CHARS,
                    max_matches=settings.MAX_CONTENT_MATCHES,
                    words_per_page=settings.WORDS_PER_PAGE,
                )
                if not summary.total_matches and not summary.title_match:
                    continue

                hits.append(
                    SearchDocument(
                        **d.model_dump(),
                        relevance_score=summary.relevance_score,
                        title_match=summary.title_match,
                        content_matches=summary.content_matches,
                        total_matches=summary.total_matches,
                    )
                )

        hits.sort(key=lambda h: (-(h.relevance_score or 0.0), h.title.lower()))
        page_docs, pagination = paginate_items(hits, page, limit)

        logger.info("local search q=%r total=%d", q, pagination.total)

        return SearchResult(documents=page_docs, pagination=pagination, search_term=q)

    async def get_document(self, doc_id: str) -> Document:
        return await asyncio.to_thread(_load_one, doc_id)
