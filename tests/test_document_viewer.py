from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

from mpwatch.main import app
from mpwatch.models.documents import Document
from mpwatch.services.documents.backend_source import BackendDocumentSource
from mpwatch.services.documents.local_source import LocalDocumentSource
from mpwatch.services.viewer import build_page

from conftest import make_document, write_document

client = TestClient(app)


def long_content(n: int = 5000, marker_at: int | None = None) -> str:
    words = [f"w{i}" for i in range(n)]
    if marker_at is not None:
        words[marker_at] = "nurdle"

    return " ".join(words)


@pytest.fixture()
def long_doc(temp_data_dir: Path):
    write_document(make_document("long-study", "Long Study", long_content(marker_at=4200)))
    app.state.document_source = LocalDocumentSource()


def test_page_three_shows_only_its_words(long_doc):
    r = client.get("/documents/long-study", params={"page": 3})
    assert r.status_code == 200, r.text

    assert 'id="document-content">w1000 ' in r.text
    assert "w1499" in r.text
    assert "w999" not in r.text
    assert "w1500" not in r.text
    assert 'max="10"' in r.text


def test_highlight_only_marks_current_page(long_doc):
    elsewhere = client.get("/documents/long-study", params={"page": 3, "highlight": "nurdle"})
    here = client.get("/documents/long-study", params={"page": 9, "highlight": "nurdle"})

    assert "<mark" not in elsewhere.text
    assert "first-highlight" not in elsewhere.text

    assert here.text.count("<mark") == 1
    assert 'id="first-highlight"' in here.text
    assert "scrollIntoView" in here.text


def test_highlight_is_kept_in_page_links(long_doc):
    r = client.get("/documents/long-study", params={"page": 3, "highlight": "nurdle"})

    assert 'href="/documents/long-study?highlight=nurdle&amp;page=2"' in r.text
    assert 'href="/documents/long-study?highlight=nurdle&amp;page=4"' in r.text


@pytest.mark.parametrize("raw,expected", [("99", 10), ("0", 1), ("abc", 1), ("-2", 1)])
def test_out_of_range_page_is_clamped(long_doc, raw, expected):
    r = client.get("/documents/long-study", params={"page": raw})

    assert r.status_code == 200
    assert f'name="page" value="{expected}"' in r.text


def test_unknown_document_is_404(corpus):
    app.state.document_source = LocalDocumentSource()

    r = client.get("/documents/does-not-exist")

    assert r.status_code == 404
    assert "Document Not Found" in r.text
    assert "Back to Research Library" in r.text


def test_backend_failure_is_502(fake_backend):
    backend = fake_backend({"/api/rag-documents/public/x1": httpx.Response(500, text="boom")})
    app.state.document_source = BackendDocumentSource(backend)

    r = client.get("/documents/x1")

    assert r.status_code == 502
    assert "Failed to load document" in r.text


def test_document_text_is_escaped(temp_data_dir: Path):
    write_document(make_document("xss", "<b>Title</b>", "<img src=x onerror=alert(1)> PET"))
    app.state.document_source = LocalDocumentSource()

    r = client.get("/documents/xss", params={"highlight": "pet"})

    assert "<img src=x" not in r.text
    assert "&lt;img src=x" in r.text
    assert "<b>Title</b>" not in r.text


def test_empty_document_has_single_page():
    dp = build_page(Document(id="e", title="Empty", content=""), page=5)

    assert (dp.page, dp.total_pages, dp.text) == (1, 1, "")
    assert dp.has_prev is False
    assert dp.has_next is False
