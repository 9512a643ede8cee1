import logging

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from mpwatch.api.deps import get_backend_client, get_cache
from mpwatch.core.config import settings
from mpwatch.services.backend_client import BackendClient
from mpwatch.services.cache.redis_cache import RedisCache
from mpwatch.services.documents.errors import BackendError, DocumentNotFoundError
from mpwatch.services.stories import fetch_story, load_news
from mpwatch.web.pages import render_message, render_news, render_story
from mpwatch.web.social import render_fallback_preview, render_story_preview

router = APIRouter(tags=["stories"])
logger = logging.getLogger(__name__)


@router.get("/api/story/{story_id}", response_class=HTMLResponse)
async def story_preview(
    story_id: str,
    client: BackendClient | None = Depends(get_backend_client),
    cache: RedisCache | None = Depends(get_cache),
) -> HTMLResponse:
    """
    Crawler-facing preview: Open Graph / Twitter tags plus a redirect to the
    story page. Always 200 with HTML; upstream trouble yields generic tags.
    """
    try:
        if client is None:
            raise BackendError("backend client not configured")
        story = await fetch_story(client, story_id, cache)
        html = render_story_preview(story, story_id)
    except Exception as e:
        logger.warning("story preview fallback story_id=%s error=%s", story_id, e)
        return HTMLResponse(render_fallback_preview(story_id), status_code=200)

    ttl = settings.STORY_CACHE_SECONDS
    cache_control = f"public, max-age={ttl}, s-maxage={ttl}"

    return HTMLResponse(html, status_code=200, headers={"Cache-Control": cache_control})


@router.get("/story/{story_id}", response_class=HTMLResponse)
async def story_page(
    story_id: str,
    client: BackendClient | None = Depends(get_backend_client),
    cache: RedisCache | None = Depends(get_cache),
) -> HTMLResponse:
    if client is None:
        return HTMLResponse(
            render_message("Error", "An unexpected error occurred."), status_code=503
        )

    try:
        story = await fetch_story(client, story_id, cache)
    except DocumentNotFoundError:
        return HTMLResponse(
            render_message("Story Not Found", "The requested story could not be found."),
            status_code=404,
        )
    except BackendError as e:
        logger.warning("story fetch failed story_id=%s error=%s", story_id, e)
        return HTMLResponse(render_message("Error", "Failed to fetch story."), status_code=502)

    return HTMLResponse(render_story(story, story_id))


@router.get("/news", response_class=HTMLResponse)
async def latest_news(
    page: str | None = Query(None),
    client: BackendClient | None = Depends(get_backend_client),
    cache: RedisCache | None = Depends(get_cache),
) -> HTMLResponse:
    # backend trouble shows inline on the page; the listing itself always renders
    view = await load_news(client, cache, page=page)

    return HTMLResponse(render_news(view))
