import httpx
import pytest

from mpwatch.services.documents.backend_source import BackendDocumentSource
from mpwatch.services.documents.errors import (
    BackendUnavailableError,
    DocumentNotFoundError,
    ResponseShapeError,
)


class FakeCache:
    def __init__(self):
        self.kv = {}

    async def get_json(self, k):
        v = self.kv.get(k)
        return type("R", (), {"hit": v is not None, "value": v})

    async def set_json(self, k, v, ttl):
        self.kv[k] = v


@pytest.mark.asyncio
async def test_search_sends_query_paging_and_filters(fake_backend):
    calls: list[httpx.Request] = []
    client = fake_backend(
        {
            "/api/rag-documents/public/search": {
                "documents": [],
                "pagination": {
                    "page": 2,
                    "limit": 5,
                    "total": 6,
                    "totalPages": 2,
                    "hasNext": False,
                    "hasPrev": True,
                },
                "searchTerm": "nurdles",
            }
        },
        calls,
    )
    source = BackendDocumentSource(client)

    result = await source.search("  nurdles ", page=2, limit=5, document_ids=["a", "b"])

    params = calls[0].url.params
    assert params["q"] == "nurdles"
    assert params["page"] == "2"
    assert params["limit"] == "5"
    assert params["documentIds"] == "a,b"
    assert result.pagination.total == 6
    assert result.search_term == "nurdles"


@pytest.mark.asyncio
async def test_get_document_maps_404(fake_backend):
    source = BackendDocumentSource(fake_backend({}))

    with pytest.raises(DocumentNotFoundError):
        await source.get_document("missing")


@pytest.mark.asyncio
async def test_network_error_is_unavailable(fake_backend):
    client = fake_backend(
        {"/api/rag-documents/public": httpx.ConnectError("connection refused")}
    )

    with pytest.raises(BackendUnavailableError):
        await BackendDocumentSource(client).list_documents()


@pytest.mark.asyncio
async def test_server_error_is_unavailable(fake_backend):
    client = fake_backend(
        {"/api/rag-documents/public": httpx.Response(500, text="boom")}
    )

    with pytest.raises(BackendUnavailableError):
        await BackendDocumentSource(client).list_documents()


@pytest.mark.asyncio
async def test_non_json_body_is_shape_error(fake_backend):
    client = fake_backend(
        {"/api/rag-documents/public/list": httpx.Response(200, text="<html>maintenance</html>")}
    )

    with pytest.raises(ResponseShapeError):
        await BackendDocumentSource(client).list_options()


@pytest.mark.asyncio
async def test_document_list_is_cached(fake_backend):
    calls: list[httpx.Request] = []
    client = fake_backend(
        {"/api/rag-documents/public": {"documents": [{"id": "d1", "title": "One"}]}},
        calls,
    )
    source = BackendDocumentSource(client, cache=FakeCache())

    first = await source.list_documents()
    second = await source.list_documents()

    assert [d.id for d in first] == [d.id for d in second] == ["d1"]
    assert len(calls) == 1
