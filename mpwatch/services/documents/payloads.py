from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from pydantic import ValidationError

from mpwatch.models.documents import Pagination, SearchDocument, SearchResult
from mpwatch.services.documents.errors import ResponseShapeError
from mpwatch.services.pagination import build_pagination, paginate_items


@dataclass(frozen=True)
class PaginatedSearchPayload:
    documents: list[SearchDocument]
    pagination: Pagination
    search_term: str


@dataclass(frozen=True)
class LegacySearchPayload:
    """
    Older backends answer without a pagination object: either a bare array
    holding every hit, or {documents, total, page, totalPages} where
    documents is already the requested page.
    """

    documents: list[SearchDocument]
    total: int | None = None


SearchPayload = Union[PaginatedSearchPayload, LegacySearchPayload]


def _documents(raw: Any) -> list[SearchDocument]:
    if not isinstance(raw, list):
        raise ResponseShapeError("documents is not a list")

    try:
        return [SearchDocument.model_validate(d) for d in raw]
    except ValidationError as e:
        raise ResponseShapeError(f"invalid document in search response: {e.error_count()} errors")


def decode_search_payload(data: Any) -> SearchPayload:
    if isinstance(data, list):
        return LegacySearchPayload(documents=_documents(data))

    if not isinstance(data, dict) or "documents" not in data:
        raise ResponseShapeError("unrecognised search response")

    documents = _documents(data["documents"])

    if "pagination" in data:
        try:
            pagination = Pagination.model_validate(data["pagination"])
        except ValidationError:
            raise ResponseShapeError("invalid pagination object")

        return PaginatedSearchPayload(
            documents=documents,
            pagination=pagination,
            search_term=str(data.get("searchTerm") or ""),
        )

    total = data.get("total")
    if total is not None and (not isinstance(total, int) or total < 0):
        raise ResponseShapeError("invalid total in search response")

    return LegacySearchPayload(documents=documents, total=total)


def to_search_result(payload: SearchPayload, *, query: str, page: int, limit: int) -> SearchResult:
    if isinstance(payload, PaginatedSearchPayload):
        return SearchResult(
            documents=payload.documents,
            pagination=payload.pagination,
            search_term=payload.search_term or query,
        )

    if payload.total is not None:
        return SearchResult(
            documents=payload.documents,
            pagination=build_pagination(page, limit, payload.total),
            search_term=query,
        )

    docs, pagination = paginate_items(payload.documents, page, limit)

    return SearchResult(documents=docs, pagination=pagination, search_term=query)
