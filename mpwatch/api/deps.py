from fastapi import HTTPException, Request

from mpwatch.services.backend_client import BackendClient
from mpwatch.services.cache.redis_cache import RedisCache
from mpwatch.services.chapters import ChapterSource
from mpwatch.services.documents.source import DocumentSource


def get_document_source(request: Request) -> DocumentSource:
    source = getattr(request.app.state, "document_source", None)
    if source is None:
        raise HTTPException(status_code=503, detail="Document source unavailable.")

    return source


def get_chapter_source(request: Request) -> ChapterSource:
    source = getattr(request.app.state, "chapter_source", None)
    if source is None:
        raise HTTPException(status_code=503, detail="Whitepaper source unavailable.")

    return source


def get_backend_client(request: Request) -> BackendClient | None:
    return getattr(request.app.state, "backend_client", None)


def get_cache(request: Request) -> RedisCache | None:
    return getattr(request.app.state, "cache", None)
