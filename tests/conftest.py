import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from mpwatch.core.config import settings
from mpwatch.main import app
from mpwatch.services.backend_client import BackendClient
from mpwatch.storage.documents import get_document_path

BACKEND_BASE = "http://backend.test"

STATE_ATTRS = ("document_source", "chapter_source", "backend_client", "cache")


@pytest.fixture(autouse=True)
def reset_app_state():
    """
    Tests inject fakes on app.state; clear them afterwards so no test sees
    another test's services.
    """
    yield
    for name in STATE_ATTRS:
        setattr(app.state, name, None)


@pytest.fixture()
def temp_data_dir(tmp_path: Path):
    """
    Uses a temporary DATA_DIR for tests and restores the original
    value after execution.
    """
    old = settings.DATA_DIR
    settings.DATA_DIR = str(tmp_path)
    (tmp_path / "documents").mkdir(parents=True, exist_ok=True)
    yield tmp_path
    settings.DATA_DIR = old


def make_document(doc_id: str, title: str, content: str, **extra: Any) -> dict[str, Any]:
    payload = {
        "id": doc_id,
        "title": title,
        "content": content,
        "file_type": "pdf",
        "metadata": {"author": "Research Team", "source": "Journal"},
        "created_at": "2024-05-01T10:00:00Z",
    }
    payload.update(extra)

    return payload


def write_document(payload: dict[str, Any]) -> Path:
    p = get_document_path(str(payload["id"]))
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")

    return p


@pytest.fixture()
def corpus(temp_data_dir: Path) -> list[dict[str, Any]]:
    """Three documents, two of which mention microplastics."""
    docs = [
        make_document(
            "ocean-survey",
            "Ocean Survey 2023",
            "Sampling across the Pacific found Microplastic fragments in every trawl. "
            "The microplastic density rose near shipping lanes.",
        ),
        make_document(
            "soil-report",
            "Agricultural Soil Report",
            "Sewage sludge spreading introduces microplastic fibres into farmland soils.",
        ),
        make_document(
            "air-quality",
            "Urban Air Quality",
            "Particulate matter and nitrogen dioxide levels were measured downtown.",
        ),
    ]
    for d in docs:
        write_document(d)

    return docs


@pytest.fixture()
def chapters_dir(tmp_path: Path) -> Path:
    root = tmp_path / "whitepaper-chapters"
    root.mkdir()
    (root / "Foreword.md").write_text("# Foreword\n\nWhy this paper exists.", encoding="utf-8")
    (root / "Chapter-1.md").write_text(
        "## Sources\n\n- Tyres\n- Textiles\n\nMost **plastic** is never recycled.",
        encoding="utf-8",
    )
    (root / "Chapter-2.md").write_text("Health effects are still being studied.", encoding="utf-8")

    return root


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=data)


def make_backend(
    routes: dict[str, Any],
    calls: list[httpx.Request] | None = None,
) -> BackendClient:
    """
    Fake backend keyed by URL path. A value can be a JSON payload, an
    httpx.Response, an exception instance to raise, or a callable taking the
    request.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)

        if request.url.path not in routes:
            return json_response({"error": "Not found"}, status_code=404)

        value = routes[request.url.path]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            value = value(request)
        if isinstance(value, httpx.Response):
            return value

        return json_response(value)

    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return BackendClient(http, BACKEND_BASE)


@pytest.fixture()
def fake_backend():
    return make_backend
