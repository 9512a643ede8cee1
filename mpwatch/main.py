import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from mpwatch.api.routes.documents import router as documents_router
from mpwatch.api.routes.health import router as health_router
from mpwatch.api.routes.library import router as library_router
from mpwatch.api.routes.stories import router as stories_router
from mpwatch.api.routes.whitepaper import router as whitepaper_router
from mpwatch.core.config import settings
from mpwatch.core.logging import setup_logging
from mpwatch.services.backend_client import BackendClient, create_http_client
from mpwatch.services.cache.redis_cache import RedisCache
from mpwatch.services.chapters import FileChapterSource, HttpChapterSource
from mpwatch.services.documents.backend_source import BackendDocumentSource
from mpwatch.services.documents.local_source import LocalDocumentSource

setup_logging()
logger = logging.getLogger(__name__)


async def _connect_cache() -> RedisCache | None:
    if not settings.ENABLE_CACHE:
        return None

    cache = RedisCache(RedisCache.connect(settings.REDIS_URL))
    if not await cache.ping():
        logger.warning("Redis unreachable at %s (cache disabled)", settings.REDIS_URL)
        await cache.close()
        return None

    logger.info("Redis cache enabled: %s", settings.REDIS_URL)
    return cache


@asynccontextmanager
async def lifespan(app: FastAPI):
    http = create_http_client()
    cache = await _connect_cache()

    backend = BackendClient(http, settings.BACKEND_URL)
    app.state.backend_client = backend
    app.state.cache = cache

    if settings.DOCUMENT_SOURCE == "local":
        app.state.document_source = LocalDocumentSource()
    else:
        app.state.document_source = BackendDocumentSource(backend, cache)
    logger.info("Document source: %s", type(app.state.document_source).__name__)

    if settings.WHITEPAPER_BASE_URL:
        app.state.chapter_source = HttpChapterSource(http, settings.WHITEPAPER_BASE_URL)
    else:
        app.state.chapter_source = FileChapterSource(settings.WHITEPAPER_DIR)

    yield

    await http.aclose()
    if cache is not None:
        await cache.close()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(documents_router)
app.include_router(library_router)
app.include_router(whitepaper_router)
app.include_router(stories_router)

app.mount(
    "/whitepaper-chapters",
    StaticFiles(directory=settings.WHITEPAPER_DIR, check_dir=False),
    name="whitepaper-chapters",
)


@app.get("/", include_in_schema=False)
def home() -> RedirectResponse:
    return RedirectResponse(url="/news")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error", extra={"path": request.url.path})

    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})
