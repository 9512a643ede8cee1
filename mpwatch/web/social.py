from __future__ import annotations

import html
import json

from mpwatch.core.config import settings
from mpwatch.models.stories import Story
from mpwatch.services.stories import story_url
from mpwatch.web.markdown import is_safe_href

FALLBACK_TITLE = "MicroplasticsWatch - Latest Research & News"


def _attr(value: str) -> str:
    return html.escape(value or "", quote=True)


def meta_tags(
    *,
    og_type: str,
    title: str,
    description: str,
    image: str,
    url: str,
) -> str:
    t, d, i, u = _attr(title), _attr(description), _attr(image), _attr(url)
    site = _attr(settings.SITE_NAME)

    return f"""  <meta name="description" content="{d}">

  <!-- Open Graph / Facebook -->
  <meta property="og:type" content="{_attr(og_type)}">
  <meta property="og:title" content="{t}">
  <meta property="og:description" content="{d}">
  <meta property="og:image" content="{i}">
  <meta property="og:url" content="{u}">
  <meta property="og:site_name" content="{site}">

  <!-- Twitter -->
  <meta name="twitter:card" content="summary_large_image">
  <meta name="twitter:title" content="{t}">
  <meta name="twitter:description" content="{d}">
  <meta name="twitter:image" content="{i}">"""


def story_meta_tags(story: Story, story_id: str) -> str:
    return meta_tags(
        og_type="article",
        title=story.title,
        description=story.ai_summary or story.title,
        image=story.ai_image_url if is_safe_href(story.ai_image_url) else settings.DEFAULT_OG_IMAGE,
        url=story_url(story_id),
    )


def fallback_meta_tags(story_id: str) -> str:
    return meta_tags(
        og_type="website",
        title=FALLBACK_TITLE,
        description=settings.DEFAULT_DESCRIPTION,
        image=settings.DEFAULT_OG_IMAGE,
        url=story_url(story_id),
    )


def _redirect_document(title: str, tags: str, target: str, extra_head: str = "") -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>{html.escape(title)}</title>
{tags}
{extra_head}
  <!-- Redirect to the actual story page for users -->
  <meta http-equiv="refresh" content="0;url={_attr(target)}">
</head>
<body>
  <p>Redirecting to story...</p>
  <script>window.location.href = {json.dumps(target)};</script>
</body>
</html>"""


def render_story_preview(story: Story, story_id: str) -> str:
    extra = (
        f'  <meta name="author" content="{_attr(settings.SITE_NAME)}">\n'
        '  <meta name="robots" content="index, follow">\n'
    )

    return _redirect_document(
        f"{story.title} | {settings.SITE_NAME}",
        story_meta_tags(story, story_id),
        story_url(story_id),
        extra,
    )


def render_fallback_preview(story_id: str) -> str:
    return _redirect_document(
        f"Story | {settings.SITE_NAME}",
        fallback_meta_tags(story_id),
        story_url(story_id),
    )
