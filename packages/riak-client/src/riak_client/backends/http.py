"""HTTP transport using httpx."""

import logging
from collections.abc import Collection, Iterator, Mapping
from typing import ClassVar, Self

import httpx

from riak_client.config import ClientSettings
from riak_client.errors import ErrorKind, FailedRequest, RiakError
from riak_client.models.datatypes import Response
from riak_client.protocols import QueryParams

logger = logging.getLogger(__name__)


def _collect_headers(headers: httpx.Headers) -> dict[str, list[str]]:
    collected: dict[str, list[str]] = {}
    for name, value in headers.multi_items():
        collected.setdefault(name.lower(), []).append(value)
    return collected


def _render_query(query: QueryParams | None) -> dict[str, str] | None:
    if not query:
        return None
    return {
        name: ("true" if value else "false") if isinstance(value, bool) else str(value)
        for name, value in query.items()
    }


class HttpBackend:
    """Transport that talks to a store node over HTTP."""

    __slots__: ClassVar[tuple[str, str]] = ("_client", "_owns_client")

    _client: httpx.Client
    _owns_client: bool

    def __init__(self, client: httpx.Client, *, owns_client: bool = True) -> None:
        self._client = client
        self._owns_client = owns_client

    @classmethod
    def connect(
        cls,
        settings: ClientSettings,
        default_headers: Mapping[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> Self:
        """Create an httpx client rooted at the configured node."""
        client = httpx.Client(
            base_url=settings.base_url,
            timeout=settings.timeout_seconds,
            headers=dict(default_headers or {}),
            transport=transport,
        )
        return cls(client)

    def close(self) -> None:
        """Close the underlying httpx client if this backend created it."""
        if self._owns_client:
            self._client.close()

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
        """Perform a buffered request, raising `FailedRequest` on unexpected status."""
        method = method.upper()
        logger.debug("%s %s expecting %s", method, path, sorted(expect))
        try:
            response = self._client.request(
                method,
                path,
                params=_render_query(query),
                headers=dict(headers or {}),
                content=body,
            )
        except httpx.TimeoutException as e:
            msg = f"{method} {path} timed out: {e}"
            raise RiakError(msg, kind=ErrorKind.TIMEOUT, source=e) from e
        except httpx.RequestError as e:
            msg = f"{method} {path} failed: {e}"
            raise RiakError(msg, kind=ErrorKind.CONNECTION, source=e) from e

        result = Response(
            status=response.status_code,
            headers=_collect_headers(response.headers),
            body=b"" if method == "HEAD" else response.content,
        )
        if result.status not in expect:
            logger.debug("%s %s returned unexpected status %d", method, path, result.status)
            raise FailedRequest(method, expect, result.status, result.headers, result.body)
        return result

    def stream(
        self,
        method: str,
        path: str,
        *,
        expect: Collection[int],
        query: QueryParams | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Iterator[bytes]:
        """Perform a request and yield the response body in chunks."""
        method = method.upper()
        logger.debug("%s %s (streaming) expecting %s", method, path, sorted(expect))
        try:
            with self._client.stream(
                method,
                path,
                params=_render_query(query),
                headers=dict(headers or {}),
            ) as response:
                if response.status_code not in expect:
                    body = response.read()
                    raise FailedRequest(
                        method, expect, response.status_code, _collect_headers(response.headers), body
                    )
                yield from response.iter_bytes()
        except httpx.TimeoutException as e:
            msg = f"{method} {path} timed out: {e}"
            raise RiakError(msg, kind=ErrorKind.TIMEOUT, source=e) from e
        except httpx.RequestError as e:
            msg = f"{method} {path} failed: {e}"
            raise RiakError(msg, kind=ErrorKind.CONNECTION, source=e) from e
