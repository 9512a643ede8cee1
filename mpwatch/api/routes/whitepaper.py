import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from mpwatch.api.deps import get_chapter_source
from mpwatch.core.config import settings
from mpwatch.services.chapters import (
    ChapterNavigator,
    ChapterSource,
    RecordingHistory,
    WhitepaperLoadError,
    load_chapters,
    plan_chapters,
)
from mpwatch.web.pages import render_whitepaper

router = APIRouter(tags=["site"])
logger = logging.getLogger(__name__)


def chapter_url(chapter_id: str) -> str:
    cid = quote(chapter_id, safe="")

    return f"/whitepaper?chapter={cid}#{cid}"


@router.get("/whitepaper", response_class=HTMLResponse)
async def whitepaper(
    chapter: str | None = Query(None, description="Active chapter slug (mirrors the URL hash)"),
    source: ChapterSource = Depends(get_chapter_source),
) -> Response:
    filenames = settings.WHITEPAPER_CHAPTERS

    # resolve the active chapter from filenames alone; a history replace
    # becomes a redirect to the canonical chapter URL
    history = RecordingHistory()
    nav = ChapterNavigator(plan_chapters(filenames), history)
    active_id = nav.initialize(chapter)
    if history.replaced and active_id is not None:
        return RedirectResponse(url=chapter_url(history.replaced[-1]), status_code=302)

    try:
        chapters = await load_chapters(source, filenames)
    except WhitepaperLoadError as e:
        logger.error("whitepaper unavailable: %s", e)
        html = render_whitepaper([], None, error=f"Failed to load whitepaper content: {e}")
        return HTMLResponse(html, status_code=503)

    active = next((c for c in chapters if c.id == active_id), None)

    return HTMLResponse(render_whitepaper(chapters, active))
