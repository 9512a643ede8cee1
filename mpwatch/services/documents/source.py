from __future__ import annotations

from typing import Protocol

from mpwatch.models.documents import Document, DocumentOption, SearchResult


class DocumentSource(Protocol):
    async def list_documents(self) -> list[Document]: ...

    async def list_options(self) -> list[DocumentOption]: ...

    async def search(
        self,
        query: str,
        *,
        page: int = 1,
        limit: int = 10,
        document_ids: list[str] | None = None,
    ) -> SearchResult: ...

    async def get_document(self, doc_id: str) -> Document: ...
