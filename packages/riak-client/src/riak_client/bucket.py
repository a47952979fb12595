"""Bucket: the namespace that owns stored objects."""

import json
from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from riak_client.errors import InvalidResponse
from riak_client.models.contexts import IndexCollection
from riak_client.models.datatypes import Response
from riak_client.robject import RObject
from riak_client.secondary_index import SecondaryIndex

if TYPE_CHECKING:
    from riak_client.client import Client, IndexQuery


def _json_payload(response: Response, context: str) -> dict[str, Any]:
    content_type = response.header("content-type") or ""
    if not content_type.endswith("json"):
        raise InvalidResponse({"content-type": ["application/json"]}, response.headers, context)
    return json.loads(response.body)


class Bucket:
    """A named collection of objects on one client.

    Fetching, storing and deleting objects goes through the client's
    transport; the bucket supplies the namespace and the path conventions.
    """

    def __init__(self, client: "Client", name: str) -> None:
        self.client = client
        self.name = name
        self._keys: list[str] | None = None
        self._props: dict[str, Any] | None = None

    def __repr__(self) -> str:
        return f"<Bucket {self.client.url(self.client.bucket_path(self.name))}>"

    def load(self, response: Response) -> "Bucket":
        """Load keys and properties from a bucket resource response."""
        payload = _json_payload(response, f"while loading bucket '{self.name}'")
        if "keys" in payload:
            self._keys = list(payload["keys"])
        if "props" in payload:
            self._props = dict(payload["props"])
        return self

    @property
    def props(self) -> dict[str, Any]:
        """Bucket properties, fetched on first access."""
        if self._props is None:
            response = self.client.transport.request(
                "GET",
                self.client.bucket_path(self.name),
                expect={200},
                query={"props": True, "keys": False},
            )
            self.load(response)
        return self._props or {}

    @property
    def allow_mult(self) -> bool:
        """Whether the store keeps siblings for concurrent writes to one key."""
        return bool(self.props.get("allow_mult", False))

    def keys(self, *, reload: bool = False) -> list[str]:
        """All keys in the bucket, cached after the first listing."""
        if self._keys is None or reload:
            response = self.client.transport.request(
                "GET",
                self.client.bucket_path(self.name),
                expect={200},
                query={"props": False, "keys": True},
            )
            self.load(response)
        return list(self._keys or [])

    def stream_keys(self) -> Iterator[list[str]]:
        """Yield keys in chunks as the store lists them, without caching."""
        chunks = self.client.transport.stream(
            "GET",
            self.client.bucket_path(self.name),
            expect={200},
            query={"props": False, "keys": "stream"},
        )
        decoder = json.JSONDecoder()
        buffer = ""
        for chunk in chunks:
            buffer += chunk.decode("utf-8")
            while buffer:
                buffer = buffer.lstrip()
                try:
                    obj, end = decoder.raw_decode(buffer)
                except ValueError:
                    break
                buffer = buffer[end:]
                if isinstance(obj, dict) and obj.get("keys"):
                    yield list(obj["keys"])

    def new(self, key: str | None = None, content_type: str | None = None) -> RObject:
        """Create an unsaved object in this bucket."""
        robject = RObject(self, key)
        robject.content_type = content_type
        return robject

    def get(self, key: str, **params: Any) -> RObject:
        """Fetch an object by key. Raises `FailedRequest` (404) when missing."""
        response = self.client.transport.request(
            "GET",
            self.client.object_path(self.name, key),
            expect={200, 300},
            query=params or None,
        )
        return RObject(self, key).load(response)

    def get_many(self, keys: Iterable[str]) -> dict[str, RObject]:
        """Fetch several objects, keyed by their keys."""
        return {key: self.get(key) for key in keys}

    def delete(self, key: str, **params: Any) -> None:
        """Delete an object by key. Deleting a missing key succeeds."""
        self.client.transport.request(
            "DELETE",
            self.client.object_path(self.name, key),
            expect={204, 404},
            query=params or None,
        )

    def get_index(self, index: str, query: "IndexQuery", **options: Any) -> IndexCollection:
        """Run a secondary index query against this bucket."""
        return SecondaryIndex(self, index, query, **options).keys()
