"""Shared fixtures: an in-memory transport that records every request."""

from __future__ import annotations

from collections.abc import Collection, Iterator, Mapping
from dataclasses import dataclass, field

import pytest

from riak_client import Bucket, Client, ClientSettings, FailedRequest, Response


@dataclass
class Call:
    """One request seen by the fake transport."""

    method: str
    path: str
    expect: frozenset[int]
    query: dict[str, object] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


def make_response(
    status: int = 200,
    headers: Mapping[str, str | list[str]] | None = None,
    body: bytes | str = b"",
) -> Response:
    """Build a response with lower-cased, multi-valued headers."""
    normalized: dict[str, list[str]] = {}
    for name, value in (headers or {}).items():
        values = value if isinstance(value, list) else [value]
        normalized.setdefault(name.lower(), []).extend(values)
    raw = body.encode("utf-8") if isinstance(body, str) else body
    return Response(status=status, headers=normalized, body=raw)


class FakeTransport:
    """Transport double that replays queued responses in order."""

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.responses: list[Response] = []
        self.chunks: list[bytes] = []
        self.closed = False

    def respond(
        self,
        status: int = 200,
        headers: Mapping[str, str | list[str]] | None = None,
        body: bytes | str = b"",
    ) -> None:
        self.responses.append(make_response(status, headers, body))

    def request(
        self,
        method: str,
        path: str,
        *,
        expect: Collection[int],
        query: Mapping[str, object] | None = None,
        headers: Mapping[str, str] | None = None,
        body: bytes | None = None,
    ) -> Response:
        self.calls.append(
            Call(method, path, frozenset(expect), dict(query or {}), dict(headers or {}), body)
        )
        if not self.responses:
            msg = f"unexpected request {method} {path}"
            raise AssertionError(msg)
        response = self.responses.pop(0)
        if response.status not in expect:
            raise FailedRequest(method, expect, response.status, response.headers, response.body)
        return response

    def stream(
        self,
        method: str,
        path: str,
        *,
        expect: Collection[int],
        query: Mapping[str, object] | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Iterator[bytes]:
        self.calls.append(Call(method, path, frozenset(expect), dict(query or {}), dict(headers or {})))
        yield from self.chunks

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(transport: FakeTransport) -> Client:
    settings = ClientSettings(client_id="test-client", server_version="1.4.2")
    return Client(settings, transport=transport)


@pytest.fixture
def bucket(client: Client) -> Bucket:
    return client.bucket("people")
