"""Domain models for search responses.

Value objects are immutable (frozen=True). Attribute names are snake_case;
``to_payload()`` produces the camelCase structure returned to callers.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchHit(BaseModel):
    """One matching line inside a document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    line_num: int = Field(alias="lineNum", ge=1)
    content: str


class SearchResult(BaseModel):
    """A ranked document with its first few matching lines."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    path: str
    name: str
    hits: list[SearchHit] = Field(default_factory=list)


class SearchPage(BaseModel):
    """Value object for a complete, paginated search response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    results: list[SearchResult] = Field(default_factory=list)
    page: int = Field(default=1, ge=1)
    total_pages: int = Field(default=0, alias="totalPages", ge=0)
    total: int = Field(default=0, ge=0)

    @classmethod
    def empty(cls) -> "SearchPage":
        """Response for blank queries and queries without matches."""
        return cls(results=[], page=1, total_pages=0, total=0)

    def to_payload(self) -> dict[str, Any]:
        """Serialize using the wire names (``lineNum``, ``totalPages``)."""
        return self.model_dump(by_alias=True)
