from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from mpwatch.core.config import settings
from mpwatch.models.documents import Pagination
from mpwatch.models.stories import Story
from mpwatch.services.backend_client import BackendClient
from mpwatch.services.cache.cache_keys import latest_news_key, story_key
from mpwatch.services.cache.redis_cache import RedisCache
from mpwatch.services.documents.errors import BackendError, ResponseShapeError
from mpwatch.services.pagination import build_pagination, paginate_items

logger = logging.getLogger(__name__)

LATEST_NEWS_PATH = "/api/latest-news"


def story_url(story_id: str) -> str:
    return f"{settings.SITE_URL.rstrip('/')}/story/{quote(str(story_id), safe='')}"


def story_path(story_id: str | int) -> str:
    return f"/story/{quote(str(story_id), safe='')}"


async def _get_cached(
    client: BackendClient, cache: RedisCache | None, key: str, path: str
) -> Any:
    if cache is not None:
        hit = await cache.get_json(key)
        if hit.hit:
            return hit.value

    data = await client.get_json(path)
    if cache is not None:
        await cache.set_json(key, data, settings.STORY_CACHE_SECONDS)

    return data


async def fetch_story(
    client: BackendClient, story_id: str, cache: RedisCache | None = None
) -> Story:
    """
    GET /api/story/{id} on the backend. Raises the BackendError family.
    """
    data = await _get_cached(
        client, cache, story_key(story_id), f"/api/story/{quote(str(story_id), safe='')}"
    )

    try:
        return Story.model_validate(data)
    except ValidationError as e:
        raise ResponseShapeError(f"invalid story {story_id}: {e.error_count()} errors")


async def fetch_latest_news(client: BackendClient, cache: RedisCache | None = None) -> list[Story]:
    """
    GET /api/latest-news: a JSON array of stories, newest first.

    Items the backend has not finished processing (no title yet) are skipped;
    a body that is not an array raises ResponseShapeError.
    """
    data = await _get_cached(client, cache, latest_news_key(), LATEST_NEWS_PATH)
    if not isinstance(data, list):
        raise ResponseShapeError("latest news response is not a list")

    stories: list[Story] = []
    for item in data:
        try:
            stories.append(Story.model_validate(item))
        except ValidationError as e:
            logger.warning("skipping news item errors=%d", e.error_count())

    return stories


@dataclass
class NewsView:
    stories: list[Story]
    pagination: Pagination
    error: str | None = None


async def load_news(
    client: BackendClient | None,
    cache: RedisCache | None = None,
    *,
    page: int | str | None = 1,
    limit: int | None = None,
) -> NewsView:
    limit = limit or settings.NEWS_PAGE_SIZE
    empty = build_pagination(1, limit, 0)

    if client is None:
        return NewsView(stories=[], pagination=empty, error="News is unavailable right now.")

    try:
        stories = await fetch_latest_news(client, cache)
    except BackendError as e:
        logger.warning("latest news failed: %s", e)
        return NewsView(
            stories=[], pagination=empty, error="Failed to load news. Please try again later."
        )

    page_stories, pagination = paginate_items(stories, page, limit)

    return NewsView(stories=page_stories, pagination=pagination)
