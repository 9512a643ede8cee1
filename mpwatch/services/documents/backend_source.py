from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from mpwatch.core.config import settings
from mpwatch.models.documents import Document, DocumentOption, SearchResult
from mpwatch.services.backend_client import BackendClient
from mpwatch.services.cache.cache_keys import (
    document_key,
    documents_key,
    normalize_query,
    options_key,
    search_key,
)
from mpwatch.services.cache.redis_cache import RedisCache
from mpwatch.services.documents.errors import ResponseShapeError
from mpwatch.services.documents.payloads import decode_search_payload, to_search_result

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/api/rag-documents/public"


def _document_list(data: Any) -> list[dict[str, Any]]:
    if isinstance(data, dict) and isinstance(data.get("documents"), list):
        return data["documents"]
    if isinstance(data, list):
        return data

    raise ResponseShapeError("unrecognised document list response")


class BackendDocumentSource:
    def __init__(self, client: BackendClient, cache: RedisCache | None = None):
        self.client = client
        self.cache = cache

    async def _get_cached(self, key: str, path: str, params: dict[str, Any] | None = None) -> Any:
        if self.cache is not None:
            hit = await self.cache.get_json(key)
            if hit.hit:
                return hit.value

        data = await self.client.get_json(path, params=params)

        if self.cache is not None:
            await self.cache.set_json(key, data, settings.CACHE_TTL_SECONDS)

        return data

    async def list_documents(self) -> list[Document]:
        data = await self._get_cached(documents_key(), PUBLIC_PREFIX)
        try:
            return [Document.model_validate(d) for d in _document_list(data)]
        except ValidationError as e:
            raise ResponseShapeError(f"invalid document list: {e.error_count()} errors")

    async def list_options(self) -> list[DocumentOption]:
        data = await self._get_cached(options_key(), f"{PUBLIC_PREFIX}/list")
        try:
            return [DocumentOption.model_validate(d) for d in _document_list(data)]
        except ValidationError as e:
            raise ResponseShapeError(f"invalid document options: {e.error_count()} errors")

    async def search(
        self,
        query: str,
        *,
        page: int = 1,
        limit: int = 10,
        document_ids: list[str] | None = None,
    ) -> SearchResult:
        q = normalize_query(query)
        params: dict[str, Any] = {"q": q, "page": page, "limit": limit}
        if document_ids:
            params["documentIds"] = ",".join(document_ids)

        data = await self._get_cached(
            search_key(q, page, limit, document_ids), f"{PUBLIC_PREFIX}/search", params=params
        )
        payload = decode_search_payload(data)
        result = to_search_result(payload, query=q, page=page, limit=limit)

        logger.info(
            "search q=%r page=%d total=%d shape=%s",
            q,
            result.pagination.page,
            result.pagination.total,
            type(payload).__name__,
        )

        return result

    async def get_document(self, doc_id: str) -> Document:
        path = f"{PUBLIC_PREFIX}/{quote(doc_id, safe='')}"
        data = await self._get_cached(document_key(doc_id), path)

        try:
            return Document.model_validate(data)
        except ValidationError as e:
            raise ResponseShapeError(f"invalid document {doc_id}: {e.error_count()} errors")
