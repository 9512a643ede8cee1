import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from mpwatch.api.deps import get_document_source
from mpwatch.core.config import settings
from mpwatch.models.documents import (
    Document,
    DocumentListResponse,
    DocumentOptionsResponse,
    SearchResult,
)
from mpwatch.services.cache.cache_keys import normalize_query
from mpwatch.services.documents.errors import (
    BackendError,
    DocumentNotFoundError,
    ResponseShapeError,
)
from mpwatch.services.documents.source import DocumentSource
from mpwatch.services.library import parse_document_ids

router = APIRouter(prefix="/api/rag-documents/public", tags=["documents"])
logger = logging.getLogger(__name__)


def _raise_for_backend(e: BackendError) -> None:
    if isinstance(e, DocumentNotFoundError):
        raise HTTPException(status_code=404, detail="Document not found.")
    if isinstance(e, ResponseShapeError):
        raise HTTPException(status_code=502, detail="Unexpected response from document backend.")

    raise HTTPException(status_code=502, detail="Document backend unavailable.")


@router.get("", response_model=DocumentListResponse)
async def list_documents(source: DocumentSource = Depends(get_document_source)):
    try:
        docs = await source.list_documents()
    except BackendError as e:
        _raise_for_backend(e)

    return DocumentListResponse(documents=docs)


@router.get("/list", response_model=DocumentOptionsResponse)
async def list_options(source: DocumentSource = Depends(get_document_source)):
    try:
        options = await source.list_options()
    except BackendError as e:
        _raise_for_backend(e)

    return DocumentOptionsResponse(documents=options)


@router.get("/search", response_model=SearchResult)
async def search_documents(
    q: str = Query(..., description="Search term"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=settings.MAX_SEARCH_LIMIT),
    document_ids: list[str] | None = Query(None, alias="documentIds"),
    source: DocumentSource = Depends(get_document_source),
):
    query = normalize_query(q)
    if not query:
        raise HTTPException(status_code=400, detail="Search term must not be empty.")
    if len(query) > settings.MAX_QUERY_CHARS:
        raise HTTPException(status_code=400, detail="Search term too long.")

    try:
        return await source.search(
            query, page=page, limit=limit, document_ids=parse_document_ids(document_ids) or None
        )
    except BackendError as e:
        _raise_for_backend(e)


@router.get("/{doc_id}", response_model=Document)
async def get_document(doc_id: str, source: DocumentSource = Depends(get_document_source)):
    try:
        return await source.get_document(doc_id)
    except BackendError as e:
        _raise_for_backend(e)
