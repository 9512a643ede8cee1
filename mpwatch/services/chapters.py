from __future__ import annotations

import asyncio
import logging
import re
import time
from dataclasses import replace
from pathlib import Path
from typing import Protocol, Sequence

import httpx

from mpwatch.models.chapters import Chapter

logger = logging.getLogger(__name__)

MD_EXT_RE = re.compile(r"\.md$", re.IGNORECASE)
SAFE_FILENAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


class WhitepaperLoadError(Exception):
    pass


def slugify(text: str) -> str:
    s = (text or "").lower()
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"[^\w\-]+", "", s, flags=re.ASCII)  # keep word chars and hyphens
    s = re.sub(r"--+", "-", s)
    s = re.sub(r"^-+", "", s)
    s = re.sub(r"-+$", "", s)

    return s


def title_from_filename(filename: str) -> str:
    title = MD_EXT_RE.sub("", filename or "")

    return title.replace("-", " ")


class ChapterSource(Protocol):
    async def fetch(self, filename: str) -> str: ...


class FileChapterSource:
    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _read(self, filename: str) -> str:
        if not SAFE_FILENAME_RE.match(filename):
            raise FileNotFoundError(filename)

        return (self.directory / filename).read_text(encoding="utf-8")

    async def fetch(self, filename: str) -> str:
        return await asyncio.to_thread(self._read, filename)


class HttpChapterSource:
    """
    Fetch chapters from a public path. A timestamp query parameter defeats
    intermediary caches so edits show up on the next load.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str):
        self.http = http
        self.base_url = base_url.rstrip("/")

    async def fetch(self, filename: str) -> str:
        resp = await self.http.get(
            f"{self.base_url}/{filename}", params={"v": int(time.time() * 1000)}
        )
        resp.raise_for_status()

        return resp.text


async def _fetch_one(source: ChapterSource, filename: str) -> tuple[str, str | None]:
    try:
        return filename, await source.fetch(filename)
    except (OSError, UnicodeDecodeError, httpx.HTTPError) as e:
        logger.warning("chapter fetch failed file=%s error=%s", filename, e)
        return filename, None


def unique_slug(slug: str, taken: set[str]) -> str:
    # "Chapter-1.md" and "Chapter 1.md" slugify alike; later ones get a suffix
    candidate = slug
    n = 2
    while candidate in taken:
        candidate = f"{slug}-{n}"
        n += 1
    taken.add(candidate)

    return candidate


def plan_chapters(filenames: Sequence[str]) -> list[Chapter]:
    """
    Ordered chapter skeletons (id, title, filename) without content.
    Ids depend on filenames only, so navigation can be resolved before any fetch.
    """
    chapters: list[Chapter] = []
    taken: set[str] = set()
    for i, filename in enumerate(filenames, start=1):
        title = title_from_filename(filename)
        chapter_id = unique_slug(slugify(title) or f"chapter-{i}", taken)
        chapters.append(Chapter(id=chapter_id, title=title, content="", filename=filename))

    return chapters


async def load_chapters(source: ChapterSource, filenames: Sequence[str]) -> list[Chapter]:
    """
    Fetch every chapter concurrently, keeping the given order.

    A failed chapter keeps its slot with empty content. Only when every
    fetch fails is the whitepaper considered unavailable.
    """
    results = await asyncio.gather(*(_fetch_one(source, f) for f in filenames))

    if filenames and all(content is None for _, content in results):
        raise WhitepaperLoadError("no whitepaper chapter could be loaded")

    chapters = [
        replace(skeleton, content=content or "")
        for skeleton, (_, content) in zip(plan_chapters(filenames), results)
    ]

    logger.info("whitepaper chapters loaded count=%d", len(chapters))

    return chapters


class HistorySink(Protocol):
    def push(self, chapter_id: str) -> None: ...

    def replace(self, chapter_id: str) -> None: ...


class RecordingHistory:
    """History sink that only records writes; the caller decides how to apply them."""

    def __init__(self) -> None:
        self.pushed: list[str] = []
        self.replaced: list[str] = []

    def push(self, chapter_id: str) -> None:
        self.pushed.append(chapter_id)

    def replace(self, chapter_id: str) -> None:
        self.replaced.append(chapter_id)


class ChapterNavigator:
    """
    Active-chapter state machine. The URL hash is input; history writes go
    to the sink and are never read back.

    States: no chapter selected (active_id is None) or one chapter active.
    """

    def __init__(self, chapters: Sequence[Chapter], history: HistorySink):
        self.chapters = list(chapters)
        self.history = history
        self.active_id: str | None = None

    def has(self, chapter_id: str | None) -> bool:
        return bool(chapter_id) and any(c.id == chapter_id for c in self.chapters)

    @property
    def active(self) -> Chapter | None:
        for c in self.chapters:
            if c.id == self.active_id:
                return c
        return None

    def _fallback_to_first(self) -> str | None:
        if not self.chapters:
            self.active_id = None
            return None

        first = self.chapters[0].id
        self.active_id = first
        self.history.replace(first)

        return first

    def initialize(self, hash_value: str | None) -> str | None:
        h = (hash_value or "").lstrip("#")
        if self.has(h):
            self.active_id = h
            return h

        return self._fallback_to_first()

    def select(self, chapter_id: str) -> str | None:
        if not self.has(chapter_id):
            return self.active_id

        self.active_id = chapter_id
        self.history.push(chapter_id)

        return chapter_id

    def on_hash_change(self, hash_value: str | None) -> str | None:
        h = (hash_value or "").lstrip("#")
        if self.has(h):
            self.active_id = h
            return h

        return self._fallback_to_first()
