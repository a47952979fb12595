"""Core protocols for store transports."""

from collections.abc import Collection, Iterator, Mapping
from typing import Protocol, TypeAlias, runtime_checkable

from riak_client.models.datatypes import Response

QueryParams: TypeAlias = Mapping[str, str | int | bool]


@runtime_checkable
class Transport(Protocol):
    """Protocol for issuing verb-based requests against the store."""

    def request(
        self,
        method: str,
        path: str,
        *,
        expect: Collection[int],
        query: QueryParams | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        """Perform one request and return the buffered response.

        Raises `FailedRequest` when the status code is not in `expect`.
        """
        ...

    def stream(
        self,
        method: str,
        path: str,
        *,
        expect: Collection[int],
        query: QueryParams | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Iterator[bytes]:
        """Perform one request and yield body chunks as they arrive."""
        ...

    def close(self) -> None:
        """Release resources and close connections."""
        ...
