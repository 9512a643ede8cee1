from __future__ import annotations

import logging
from typing import Any

import httpx

from mpwatch.core.config import settings
from mpwatch.services.documents.errors import (
    BackendUnavailableError,
    DocumentNotFoundError,
    ResponseShapeError,
)

logger = logging.getLogger(__name__)


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=settings.BACKEND_TIMEOUT_SECONDS,
        headers={"Accept": "application/json"},
        follow_redirects=True,
    )


class BackendClient:
    """
    Thin JSON wrapper over the backend REST API.

    Every failure is mapped onto the BackendError family so callers only
    deal with three cases: unavailable, not found, bad shape.
    """

    def __init__(self, http: httpx.AsyncClient, base_url: str | None = None):
        self.http = http
        self.base_url = (base_url or settings.BACKEND_URL).rstrip("/")

    def url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = self.url(path)

        try:
            resp = await self.http.get(url, params=params)
        except httpx.HTTPError as e:
            logger.warning("backend request failed url=%s error=%s", url, e)
            raise BackendUnavailableError(str(e)) from e

        if resp.status_code == 404:
            raise DocumentNotFoundError(path)
        if resp.status_code >= 400:
            logger.warning("backend error url=%s status=%d", url, resp.status_code)
            raise BackendUnavailableError(f"Backend responded with status: {resp.status_code}")

        try:
            return resp.json()
        except ValueError as e:
            raise ResponseShapeError(f"invalid JSON from {path}") from e
