"""Parameter types for query configuration.

Params define how a query is issued (page size, extra fields), while
contexts carry the state returned by the store (continuation tokens).
"""

from pydantic import BaseModel, Field


class IndexOptions(BaseModel, frozen=True):
    """Options for secondary index queries."""

    continuation: str | None = None
    """Opaque token returned by a previous page; resumes the scan after it."""

    max_results: int | None = Field(default=None, gt=0)
    """Maximum number of results per page. Enables pagination."""

    return_terms: bool = False
    """Return the matching index term alongside each key."""

    stream: bool = False
    """Stream results as they arrive. Not supported by this client."""

    @property
    def paginated(self) -> bool:
        """Whether these options ask for store-side pagination."""
        return self.continuation is not None or self.max_results is not None

    def to_query(self) -> dict[str, str]:
        """Render the options as index request query parameters."""
        query: dict[str, str] = {}
        if self.max_results is not None:
            query["max_results"] = str(self.max_results)
        if self.continuation is not None:
            query["continuation"] = self.continuation
        if self.return_terms:
            query["return_terms"] = "true"
        return query
