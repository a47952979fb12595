"""Client entry point: configuration, path conventions and server features."""

import base64
import json
import logging
import re
import secrets
from collections.abc import Iterable
from typing import TYPE_CHECKING, Self, TypeAlias
from urllib.parse import quote

from riak_client.backends.http import HttpBackend
from riak_client.bucket import Bucket
from riak_client.config import ClientSettings
from riak_client.errors import InvalidResponse, PreconditionError
from riak_client.models.contexts import IndexCollection
from riak_client.models.params import IndexOptions
from riak_client.protocols import Transport

if TYPE_CHECKING:
    from riak_client.walk_spec import WalkSpec

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**32
"""Integer client ids must be below this value."""

INDEX_PAGINATION_VERSION = (1, 4, 0)
INDEX_RETURN_TERMS_VERSION = (1, 4, 0)

IndexQuery: TypeAlias = str | int | tuple[str | int, str | int] | range


def escape(segment: str | int) -> str:
    """Escape one path segment, including any slashes in it."""
    return quote(str(segment), safe="")


def _encode_client_id(client_id: str | int | None) -> str:
    if client_id is None:
        return base64.b64encode(secrets.token_bytes(4)).decode("ascii")
    if isinstance(client_id, int):
        if not 0 <= client_id < MAX_CLIENT_ID:
            msg = f"Client id must be a non-negative integer below {MAX_CLIENT_ID}"
            raise PreconditionError(msg)
        return base64.b64encode(client_id.to_bytes(4, "big")).decode("ascii")
    return client_id


def _parse_version(version: str) -> tuple[int, ...]:
    return tuple(int(part) for part in re.findall(r"\d+", version)[:3])


class Client:
    """A connection to one store node.

    Owns the transport, the path layout of the HTTP interface and the
    capability checks used by secondary index queries.
    """

    def __init__(
        self,
        settings: ClientSettings | None = None,
        *,
        transport: Transport | None = None,
    ) -> None:
        self.settings = settings or ClientSettings()
        self._client_id = _encode_client_id(self.settings.client_id)
        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpBackend.connect(
            self.settings, {"X-Riak-ClientId": self._client_id}
        )
        self._buckets: dict[str, Bucket] = {}
        self._server_version: tuple[int, ...] | None = (
            _parse_version(self.settings.server_version) if self.settings.server_version else None
        )

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"<Client {self.settings.base_url}{self.prefix}>"

    @property
    def client_id(self) -> str:
        return self._client_id

    @client_id.setter
    def client_id(self, value: str | int) -> None:
        self._client_id = _encode_client_id(value)

    @property
    def prefix(self) -> str:
        return self.settings.prefix

    def bucket(self, name: str) -> Bucket:
        """Return the bucket with the given name."""
        if not isinstance(name, str):
            msg = f"Bucket name must be a string, got {name!r}"
            raise PreconditionError(msg)
        bucket = self._buckets.get(name)
        if bucket is None:
            bucket = self._buckets[name] = Bucket(self, name)
        return bucket

    # Paths

    def bucket_path(self, bucket: str) -> str:
        return self._join(self.prefix, escape(bucket))

    def object_path(self, bucket: str, key: str | None = None) -> str:
        """Path of an object, or of its bucket while the key is unknown."""
        if key is None:
            return self.bucket_path(bucket)
        return self._join(self.prefix, escape(bucket), escape(key))

    def link_walk_path(self, bucket: str, key: str, specs: Iterable["WalkSpec"]) -> str:
        hops = "/".join(spec.to_path_segment() for spec in specs)
        return self._join(self.prefix, escape(bucket), escape(key), hops)

    def index_path(self, bucket: str, index: str, query: IndexQuery) -> str:
        segments = [self.settings.index_prefix, escape(bucket), "index", escape(index)]
        if isinstance(query, range):
            if query.step != 1 or len(query) == 0:
                msg = f"Index ranges must be contiguous and non-empty, got {query!r}"
                raise PreconditionError(msg)
            segments += [escape(query.start), escape(query.stop - 1)]
        elif isinstance(query, tuple):
            start, end = query
            segments += [escape(start), escape(end)]
        else:
            segments.append(escape(query))
        return self._join(*segments)

    def url(self, path: str) -> str:
        return f"{self.settings.base_url}{path}"

    @staticmethod
    def _join(*segments: str) -> str:
        path = "/".join(segment.strip("/") for segment in segments if segment.strip("/"))
        return f"/{path}"

    # Server features

    @property
    def server_version(self) -> tuple[int, ...]:
        """Version of the connected node, detected once from its stats resource."""
        if self._server_version is None:
            response = self.transport.request("GET", self.settings.stats_path, expect={200})
            content_type = response.header("content-type") or ""
            if "json" not in content_type:
                raise InvalidResponse(
                    {"content-type": ["application/json"]},
                    response.headers,
                    "while detecting the server version",
                )
            stats = json.loads(response.body)
            self._server_version = _parse_version(str(stats.get("riak_kv_version", "0.0.0")))
            logger.debug("Detected server version %s", self._server_version)
        return self._server_version

    def index_pagination(self) -> bool:
        return self.server_version >= INDEX_PAGINATION_VERSION

    def index_return_terms(self) -> bool:
        return self.server_version >= INDEX_RETURN_TERMS_VERSION

    def get_index(
        self,
        bucket: Bucket | str,
        index: str,
        query: IndexQuery,
        options: IndexOptions | None = None,
    ) -> IndexCollection:
        """Run a secondary index query and return one page of keys."""
        name = bucket if isinstance(bucket, str) else bucket.name
        options = options or IndexOptions()
        response = self.transport.request(
            "GET",
            self.index_path(name, index, query),
            expect={200},
            query=options.to_query(),
        )
        return IndexCollection.from_response(response)
