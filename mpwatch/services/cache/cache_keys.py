from __future__ import annotations

import hashlib
import re

WS_RE = re.compile(r"\s+")

CACHE_VERSION = "v1"


def normalize_query(q: str) -> str:
    q = (q or "").strip()
    q = WS_RE.sub(" ", q)

    return q


def sha256_hex(s: str) -> str:
    return hashlib.sha256((s or "").encode("utf-8")).hexdigest()


def documents_key() -> str:
    return f"docs:{CACHE_VERSION}:all"


def options_key() -> str:
    return f"docs:{CACHE_VERSION}:options"


def document_key(doc_id: str) -> str:
    return f"doc:{CACHE_VERSION}:{sha256_hex(doc_id)}"


def search_key(query: str, page: int, limit: int, document_ids: list[str] | None) -> str:
    qn = normalize_query(query).lower()
    ids = ",".join(sorted(document_ids or []))

    return f"search:{CACHE_VERSION}:{sha256_hex(qn)}:{sha256_hex(ids)}:{page}:{limit}"


def story_key(story_id: str) -> str:
    return f"story:{CACHE_VERSION}:{sha256_hex(story_id)}"


def latest_news_key() -> str:
    return f"news:{CACHE_VERSION}:latest"
