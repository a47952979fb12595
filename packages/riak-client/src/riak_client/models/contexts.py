"""Context types for paginated reads.

Contexts carry state needed to resume reading from a specific position.
They only track *where* to resume, not *how much* to read (that's in Params).
"""

import json
from collections.abc import Iterable

from riak_client.errors import InvalidResponse
from riak_client.models.datatypes import Response


class IndexCollection(list[str]):
    """One page of secondary index results.

    Behaves as the ordered list of matched keys. When terms were requested,
    `with_terms` holds the (term, key) pairs in the order the store sent them.
    """

    continuation: str | None
    """Token for the next page, or None when this is the last page."""

    with_terms: list[tuple[str, str]] | None
    """(term, key) pairs, present only when terms were returned."""

    def __init__(
        self,
        keys: Iterable[str] = (),
        continuation: str | None = None,
        with_terms: list[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(keys)
        self.continuation = continuation
        self.with_terms = with_terms

    @classmethod
    def from_response(cls, response: Response) -> "IndexCollection":
        """Build a page from an index query response body."""
        content_type = response.header("content-type") or ""
        if "json" not in content_type:
            raise InvalidResponse(
                {"content-type": ["application/json"]},
                response.headers,
                "while reading secondary index results",
            )
        try:
            payload = json.loads(response.body)
        except ValueError as e:
            raise InvalidResponse(
                {"content-type": ["application/json"]},
                response.headers,
                f"with an undecodable index body: {e}",
            ) from e
        continuation = payload.get("continuation")

        if "results" in payload:
            pairs = [
                (str(term), str(key))
                for result in payload["results"]
                for term, key in result.items()
            ]
            return cls([key for _, key in pairs], continuation, pairs)

        return cls(payload.get("keys", []), continuation)

    def __repr__(self) -> str:
        return f"IndexCollection({list(self)!r}, continuation={self.continuation!r})"
