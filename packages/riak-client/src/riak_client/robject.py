"""RObject: the data and metadata stored at one bucket/key pair."""

import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from email.utils import format_datetime, parsedate_to_datetime
from typing import TYPE_CHECKING, Any, ClassVar, Self
from urllib.parse import unquote

from riak_client import multipart
from riak_client.errors import InvalidResponse, PreconditionError
from riak_client.link import Link
from riak_client.models.datatypes import Part, Response
from riak_client.serializers import SerializerRegistry, default_registry
from riak_client.walk_spec import WalkSpec

if TYPE_CHECKING:
    from riak_client.bucket import Bucket
    from riak_client.client import Client

logger = logging.getLogger(__name__)

META_PREFIX = "x-riak-meta-"
VCLOCK_HEADER = "X-Riak-Vclock"

_LOCATION_PATTERN = re.compile(r"^/.*/([^/]+)/([^/]+)$")


def _parse_http_date(value: str) -> datetime | None:
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.debug("Ignoring unparsable HTTP date %r", value)
        return None


def _format_http_date(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return format_datetime(value.astimezone(UTC), usegmt=True)


def _load_part(robject: "RObject", part: Response) -> "RObject | None":
    try:
        return robject.load(part)
    except InvalidResponse as e:
        logger.debug("Skipping multipart content: %s", e)
        return None


class RObject:
    """An object stored in a bucket, with its content type, links and metadata.

    An object starts out new (no key) or loaded from a response. Storing it
    assigns a key when it had none. When a load observes concurrent writes
    (status 300 with a multipart body), `conflict` is set and `siblings`
    holds one object per concurrent value, each carrying the vector clock
    needed to resolve the conflict by storing it. A deleted object can no
    longer be modified or used for requests.

    Payloads are converted according to `content_type` through the
    `serializers` registry, which may be replaced per instance.
    """

    serializers: ClassVar[SerializerRegistry] = default_registry

    bucket: "Bucket"
    key: str | None
    content_type: str | None
    vclock: str | None
    data: Any
    links: set[Link]
    etag: str | None
    last_modified: datetime | None
    meta: dict[str, str]
    conflict: bool

    def __init__(
        self,
        bucket: "Bucket",
        key: str | None = None,
        *,
        serializers: SerializerRegistry | None = None,
    ) -> None:
        self._deleted = False
        self.bucket = bucket
        self.key = key
        self.content_type = None
        self.vclock = None
        self.data = None
        self.links = set()
        self.etag = None
        self.last_modified = None
        self.meta = {}
        self.conflict = False
        self._siblings: list[RObject] | None = None
        if serializers is not None:
            self.serializers = serializers  # pyright: ignore[reportAttributeAccessIssue]

    def __setattr__(self, name: str, value: Any) -> None:
        if getattr(self, "_deleted", False):
            msg = f"Cannot set {name!r} on a deleted object"
            raise PreconditionError(msg)
        super().__setattr__(name, value)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.url} [{self.content_type}]:{self.data!r}>"

    @property
    def client(self) -> "Client":
        return self.bucket.client

    @property
    def vector_clock(self) -> str | None:
        return self.vclock

    @vector_clock.setter
    def vector_clock(self, value: str | None) -> None:
        self.vclock = value

    @property
    def deleted(self) -> bool:
        return self._deleted

    @property
    def url(self) -> str:
        """URL of this object, or of its bucket while it has no key."""
        return self.client.url(self.client.object_path(self.bucket.name, self.key))

    def load(self, response: Response) -> Self:
        """Populate this object from a response or a multipart part."""
        location = response.header("location")
        if location:
            self.key = unquote(location.rstrip("/").rsplit("/", 1)[-1])

        if (content_type := response.header("content-type")) is not None:
            self.content_type = content_type
        if (vclock := response.header("x-riak-vclock")) is not None:
            self.vclock = vclock
        if (link_header := response.header("link")) is not None:
            self.links = set(Link.parse(link_header))
        if (etag := response.header("etag")) is not None:
            self.etag = etag
        if (last_modified := response.header("last-modified")) is not None:
            self.last_modified = _parse_http_date(last_modified)

        meta: dict[str, str] = {}
        for name, values in response.headers.items():
            name = name.lower()
            if name.startswith(META_PREFIX) and len(name) > len(META_PREFIX):
                meta[name[len(META_PREFIX) :]] = ", ".join(values)
        # A bodiless reply (204 to a store without returnbody) carries no metadata.
        if meta or response.body:
            self.meta = meta

        self.conflict = response.status == 300 and "multipart/mixed" in (
            (self.content_type or "").lower()
        )
        self._siblings = None
        if self.conflict:
            logger.debug("Conflicting writes detected at %s", self.url)

        if response.body:
            self.data = response.body if self.conflict else self.deserialize(response.body)
        return self

    def serialize(self, payload: Any) -> bytes:
        """Encode a payload for storage according to the content type."""
        return self.serializers.serialize(self.content_type, payload, self.meta)

    def deserialize(self, body: bytes) -> Any:
        """Decode a stored body according to the content type."""
        return self.serializers.deserialize(self.content_type, body, self.meta)

    def store_headers(self) -> dict[str, str]:
        """Headers sent along when storing the object."""
        headers: dict[str, str] = {"Content-Type": self.content_type or ""}
        if self.vclock:
            headers[VCLOCK_HEADER] = self.vclock
        # "up" links point back at the bucket and are rebuilt by the store.
        links = sorted((link for link in self.links if link.rel != "up"), key=str)
        if links:
            headers["Link"] = Link.to_header(links)
        for name, value in self.meta.items():
            headers[f"X-Riak-Meta-{name}"] = str(value)
        return headers

    def reload_headers(self) -> dict[str, str]:
        """Conditional request headers sent along when reloading the object."""
        headers: dict[str, str] = {}
        if self.etag:
            headers["If-None-Match"] = self.etag
        if self.last_modified is not None:
            headers["If-Modified-Since"] = _format_http_date(self.last_modified)
        return headers

    def store(self, **params: Any) -> Self:
        """Store the object, then load the stored representation into it.

        Keyword arguments become query parameters (`w`, `dw`, `returnbody`...).
        Objects without a key are POSTed and receive the key the store assigns.
        Metadata is kept when the store replies without a body, so a later
        store sends it again.
        """
        self._require_usable()
        if not self.content_type:
            msg = "Cannot store an object without a content type"
            raise PreconditionError(msg)

        if self.key:
            method, expect = "PUT", {200, 204, 300}
        else:
            method, expect = "POST", {201}

        response = self.client.transport.request(
            method,
            self.client.object_path(self.bucket.name, self.key),
            expect=expect,
            query={"returnbody": True, **params},
            headers=self.store_headers(),
            body=self.serialize(self.data),
        )
        return self.load(response)

    def reload(self, *, force: bool = False, **params: Any) -> Self:
        """Reload the object, using conditional GET when possible.

        Does nothing unless the object has a key and a vector clock; `force`
        reloads without a vector clock. A 304 response leaves it untouched.
        """
        self._require_usable()
        if not self.key or not (self.vclock or force):
            return self

        expect = {200, 300, 304} if self.bucket.allow_mult else {200, 304}
        response = self.client.transport.request(
            "GET",
            self.client.object_path(self.bucket.name, self.key),
            expect=expect,
            query=params or None,
            headers=self.reload_headers(),
        )
        if response.status != 304:
            self.load(response)
        return self

    fetch = reload

    def delete(self, **params: Any) -> None:
        """Delete the object from the store; the instance is unusable afterwards."""
        self._require_usable()
        if not self.key:
            return
        self.bucket.delete(self.key, **params)
        self._deleted = True

    @property
    def siblings(self) -> list["RObject"]:
        """The concurrent values of this object, or `[self]` without a conflict."""
        if not self.conflict:
            return [self]
        if self._siblings is None:
            boundary = multipart.extract_boundary(self.content_type)
            parts = multipart.parse(self.data or b"", boundary) if boundary else []
            self._siblings = [
                sibling
                for part in parts
                if isinstance(part, Response) and (sibling := self._sibling_from(part)) is not None
            ]
            logger.debug("Materialized %d siblings for %s", len(self._siblings), self.url)
        return self._siblings

    def _sibling_from(self, part: Response) -> "RObject | None":
        sibling = type(self)(self.bucket, self.key, serializers=self.serializers)
        if _load_part(sibling, part) is None:
            return None
        sibling.vclock = self.vclock
        return sibling

    def walk(self, *args: Any, **kwargs: Any) -> list[list["RObject"]]:
        """Follow links from this object, one result group per kept hop.

        Accepts anything `WalkSpec.normalize` does, e.g.
        `obj.walk(tag="friend")` or `obj.walk({"bucket": "people"}, {"tag": "pet", "keep": True})`.
        """
        self._require_usable()
        if not self.key:
            msg = "Cannot walk links from an object without a key"
            raise PreconditionError(msg)
        specs = WalkSpec.normalize(*args, **kwargs)
        if not specs:
            msg = "A link walk needs at least one walk spec"
            raise PreconditionError(msg)

        response = self.client.transport.request(
            "GET",
            self.client.link_walk_path(self.bucket.name, self.key, specs),
            expect={200},
        )
        boundary = multipart.extract_boundary(response.header("content-type"))
        if boundary is None:
            return []
        return [self._walk_group(group) for group in multipart.parse(response.body, boundary)]

    def _walk_group(self, group: Part) -> list["RObject"]:
        parts = group if isinstance(group, list) else [group]
        results: list[RObject] = []
        for part in parts:
            if not isinstance(part, Response):
                continue
            match = _LOCATION_PATTERN.match(part.header("location") or "")
            if match is None:
                continue
            bucket, key = unquote(match.group(1)), unquote(match.group(2))
            robject = type(self)(self.client.bucket(bucket), key, serializers=self.serializers)
            if _load_part(robject, part) is not None:
                results.append(robject)
        return results

    def to_link(self, tag: str) -> Link:
        """A link pointing at this object, for storing on another object."""
        if not self.key:
            msg = "Cannot link to an object without a key"
            raise PreconditionError(msg)
        return Link(self.client.object_path(self.bucket.name, self.key), tag)

    @classmethod
    def from_map_reduce(cls, client: "Client", result: Mapping[str, Any]) -> Self:
        """Build an object from one map/reduce result record.

        A record with several values yields a conflicted object whose
        siblings share the record's vector clock.
        """
        bucket = client.bucket(result["bucket"])
        robject = cls(bucket, result["key"])
        robject.vclock = result.get("vclock") or None

        values = result.get("values") or []
        if len(values) <= 1:
            if values:
                robject._load_map_reduce_value(values[0])
            return robject

        robject.conflict = True
        siblings: list[RObject] = []
        for value in values:
            sibling = cls(bucket, result["key"])
            sibling.vclock = robject.vclock
            siblings.append(sibling._load_map_reduce_value(value))
        robject._siblings = siblings
        return robject

    def _load_map_reduce_value(self, value: Mapping[str, Any]) -> Self:
        metadata = value.get("metadata") or {}
        if etag := metadata.get("X-Riak-VTag"):
            self.etag = etag
        if content_type := metadata.get("content-type"):
            self.content_type = content_type
        if last_modified := metadata.get("X-Riak-Last-Modified"):
            self.last_modified = _parse_http_date(last_modified)
        if links := metadata.get("Links"):
            self.links = {
                Link(self.client.object_path(bucket, key), tag) for bucket, key, tag in links
            }
        if meta := metadata.get("X-Riak-Meta"):
            self.meta = {re.sub(r"(?i)^x-riak-meta-", "", name): str(v) for name, v in meta.items()}

        data = value.get("data")
        if data is not None:
            body = data.encode("utf-8") if isinstance(data, str) else data
            self.data = self.deserialize(body)
        return self

    def _require_usable(self) -> None:
        if self._deleted:
            msg = f"{self.url} has been deleted"
            raise PreconditionError(msg)
