import pytest

from mpwatch.services.documents.errors import ResponseShapeError
from mpwatch.services.documents.payloads import (
    LegacySearchPayload,
    PaginatedSearchPayload,
    decode_search_payload,
    to_search_result,
)


def doc(i: int) -> dict:
    return {"id": f"d{i}", "title": f"Doc {i}", "content": "microplastic", "file_type": "pdf"}


def test_paginated_shape_is_trusted():
    data = {
        "documents": [
            {
                **doc(1),
                "relevanceScore": 3.5,
                "titleMatch": False,
                "totalMatches": 2,
                "contentMatches": [{"snippet": "...microplastic...", "page": 4, "position": 2100}],
            }
        ],
        "pagination": {
            "page": 2,
            "limit": 1,
            "total": 7,
            "totalPages": 7,
            "hasNext": True,
            "hasPrev": True,
        },
        "searchTerm": "microplastic",
    }

    payload = decode_search_payload(data)
    result = to_search_result(payload, query="microplastic", page=2, limit=1)

    assert isinstance(payload, PaginatedSearchPayload)
    assert result.pagination.total == 7
    assert result.documents[0].content_matches[0].page == 4
    assert result.documents[0].relevance_score == 3.5


def test_bare_array_is_paginated_locally():
    payload = decode_search_payload([doc(i) for i in range(25)])

    result = to_search_result(payload, query="x", page=3, limit=10)

    assert isinstance(payload, LegacySearchPayload)
    assert [d.id for d in result.documents] == ["d20", "d21", "d22", "d23", "d24"]
    assert result.pagination.total == 25
    assert result.pagination.total_pages == 3
    assert result.pagination.has_next is False


def test_legacy_object_with_total_keeps_its_page():
    data = {"documents": [doc(11), doc(12)], "total": 12, "page": 2, "totalPages": 2}

    result = to_search_result(decode_search_payload(data), query="x", page=2, limit=10)

    assert [d.id for d in result.documents] == ["d11", "d12"]
    assert result.pagination.total == 12
    assert result.pagination.total_pages == 2
    assert result.pagination.has_prev is True


@pytest.mark.parametrize(
    "data",
    [
        None,
        "oops",
        {"results": []},
        {"documents": "nope"},
        {"documents": [{"title": "missing id"}]},
        {"documents": [], "pagination": {"page": 0}},
        {"documents": [], "total": -1},
    ],
)
def test_unrecognised_shapes_raise(data):
    with pytest.raises(ResponseShapeError):
        decode_search_payload(data)
