from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from mpwatch.api.deps import get_document_source
from mpwatch.services.documents.source import DocumentSource
from mpwatch.services.library import load_library, parse_document_ids
from mpwatch.services.viewer import open_document
from mpwatch.web.pages import render_document_not_found, render_document_page, render_library

router = APIRouter(tags=["site"])


@router.get("/research-library", response_class=HTMLResponse)
async def research_library(
    q: str | None = Query(None),
    page: str | None = Query(None),
    document_ids: list[str] | None = Query(None, alias="documentIds"),
    source: DocumentSource = Depends(get_document_source),
) -> HTMLResponse:
    view = await load_library(
        source, query=q, page=page, document_ids=parse_document_ids(document_ids)
    )

    return HTMLResponse(render_library(view))


@router.get("/documents/{doc_id}", response_class=HTMLResponse)
async def document_viewer(
    doc_id: str,
    page: str | None = Query(None),
    highlight: str | None = Query(None),
    source: DocumentSource = Depends(get_document_source),
) -> HTMLResponse:
    # page stays a string: out-of-range or junk values are clamped, not rejected
    result = await open_document(source, doc_id, page=page, highlight=highlight)

    if result.page is None:
        return HTMLResponse(
            render_document_not_found(result.error or "Document not found"),
            status_code=404 if result.not_found else 502,
        )

    return HTMLResponse(render_document_page(result.page))
