"""Unit tests for bucket properties, key listing and object access."""

from __future__ import annotations

import pytest

from riak_client import Bucket, ErrorKind, FailedRequest, InvalidResponse, Response

from conftest import FakeTransport

JSON = {"Content-Type": "application/json"}


def test_props_are_fetched_once(bucket: Bucket, transport: FakeTransport) -> None:
    """Bucket properties should be fetched lazily and cached."""
    transport.respond(200, JSON, '{"props": {"n_val": 3, "allow_mult": true}}')

    assert bucket.props == {"n_val": 3, "allow_mult": True}
    assert bucket.allow_mult is True

    (call,) = transport.calls
    assert call.path == "/riak/people"
    assert call.query == {"props": True, "keys": False}


def test_allow_mult_defaults_to_false(bucket: Bucket) -> None:
    """A bucket without the property should not allow siblings."""
    bucket.load(Response(headers={"content-type": ["application/json"]}, body=b'{"props": {}}'))

    assert bucket.allow_mult is False


def test_load_requires_json(bucket: Bucket) -> None:
    """Bucket responses with another content type should be rejected."""
    with pytest.raises(InvalidResponse) as exc_info:
        bucket.load(Response(headers={"content-type": ["text/plain"]}, body=b"{}"))

    assert exc_info.value.kind is ErrorKind.INVALID_RESPONSE
    assert "people" in exc_info.value.context


def test_keys_are_cached_until_reload(bucket: Bucket, transport: FakeTransport) -> None:
    """keys() should reuse the first listing unless asked to reload."""
    transport.respond(200, JSON, '{"keys": ["a", "b"]}')
    transport.respond(200, JSON, '{"keys": ["a", "b", "c"]}')

    assert bucket.keys() == ["a", "b"]
    assert bucket.keys() == ["a", "b"]
    assert bucket.keys(reload=True) == ["a", "b", "c"]

    assert len(transport.calls) == 2
    assert transport.calls[0].query == {"props": False, "keys": True}


def test_stream_keys_yields_chunks_across_reads(bucket: Bucket, transport: FakeTransport) -> None:
    """Streamed listings should be decoded even when objects span chunks."""
    transport.chunks = [b'{"keys": ["a", "b"]}{"ke', b'ys": []}\n{"keys": ["c"]}']

    assert list(bucket.stream_keys()) == [["a", "b"], ["c"]]

    (call,) = transport.calls
    assert call.query == {"props": False, "keys": "stream"}


def test_get_loads_object(bucket: Bucket, transport: FakeTransport) -> None:
    """get() should fetch and load the object at a key."""
    transport.respond(200, JSON, '{"name": "Alice"}')

    robject = bucket.get("alice", r=1)

    assert robject.key == "alice"
    assert robject.data == {"name": "Alice"}
    assert transport.calls[0].expect == {200, 300}
    assert transport.calls[0].query == {"r": 1}


def test_get_missing_key_raises_not_found(bucket: Bucket, transport: FakeTransport) -> None:
    """Fetching a missing key should raise a not-found FailedRequest."""
    transport.respond(404, body="not found")

    with pytest.raises(FailedRequest) as exc_info:
        bucket.get("ghost")

    assert exc_info.value.not_found
    assert exc_info.value.kind is ErrorKind.NOT_FOUND


def test_get_many_returns_objects_by_key(bucket: Bucket, transport: FakeTransport) -> None:
    """get_many() should fetch each key in turn."""
    transport.respond(200, {"Content-Type": "text/plain"}, "1")
    transport.respond(200, {"Content-Type": "text/plain"}, "2")

    objects = bucket.get_many(["x", "y"])

    assert {key: robject.data for key, robject in objects.items()} == {"x": b"1", "y": b"2"}


@pytest.mark.parametrize("status", [204, 404])
def test_delete_accepts_missing_keys(
    bucket: Bucket, transport: FakeTransport, status: int
) -> None:
    """Deleting succeeds whether or not the key existed."""
    transport.respond(status)

    bucket.delete("a b", rw=2)

    (call,) = transport.calls
    assert call.method == "DELETE"
    assert call.path == "/riak/people/a%20b"
    assert call.query == {"rw": 2}


def test_new_builds_unsaved_object(bucket: Bucket, transport: FakeTransport) -> None:
    """new() should not touch the store."""
    robject = bucket.new("k", "text/plain")

    assert robject.bucket is bucket
    assert robject.key == "k"
    assert robject.content_type == "text/plain"
    assert robject.vclock is None
    assert transport.calls == []
