from pydantic import BaseModel, ConfigDict, Field


class DocumentMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    author: str | None = None
    date: str | None = None
    source: str | None = None
    notes: str | None = None


class Document(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    title: str
    content: str = ""
    file_type: str = "txt"
    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    created_at: str | None = None


class DocumentOption(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    title: str
    file_type: str | None = None


class ContentMatch(BaseModel):
    snippet: str
    page: int = Field(..., ge=1)
    position: int = Field(0, ge=0)


class SearchDocument(Document):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    relevance_score: float | None = Field(None, alias="relevanceScore")
    title_match: bool | None = Field(None, alias="titleMatch")
    content_matches: list[ContentMatch] = Field(default_factory=list, alias="contentMatches")
    total_matches: int | None = Field(None, alias="totalMatches")


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int = Field(..., ge=1)
    limit: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    total_pages: int = Field(..., ge=0, alias="totalPages")
    has_next: bool = Field(..., alias="hasNext")
    has_prev: bool = Field(..., alias="hasPrev")


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    documents: list[SearchDocument]
    pagination: Pagination
    search_term: str = Field("", alias="searchTerm")


class DocumentListResponse(BaseModel):
    documents: list[Document]


class DocumentOptionsResponse(BaseModel):
    documents: list[DocumentOption]
