"""Unit tests for the content-type serializer registry."""

from __future__ import annotations

import json
import pickle

import pytest

from riak_client import InvalidResponse
from riak_client.serializers import (
    PASSTHROUGH,
    PICKLE_META_KEY,
    SerializerRegistry,
    default_registry,
)

DOCUMENT = {
    "name": "alice",
    "age": 42,
    "ratio": 0.5,
    "tags": ["a", "b", None],
    "address": {"city": "Paris", "zip": None},
    "active": True,
}


@pytest.mark.parametrize("content_type", ["application/json", "text/yaml", "application/x-yaml"])
def test_structured_formats_round_trip(content_type: str) -> None:
    """JSON and YAML payloads should decode back to the original structure."""
    body = default_registry.serialize(content_type, DOCUMENT)

    assert isinstance(body, bytes)
    assert default_registry.deserialize(content_type, body) == DOCUMENT


def test_json_is_encoded_as_json() -> None:
    """JSON content types should produce a JSON document."""
    body = default_registry.serialize("application/json; charset=utf-8", [1, "two"])

    assert json.loads(body) == [1, "two"]


def test_unknown_content_types_pass_through() -> None:
    """Other content types should leave bytes alone and encode text."""
    assert default_registry.lookup("text/plain") is PASSTHROUGH
    assert default_registry.serialize("text/plain", b"\x00raw") == b"\x00raw"
    assert default_registry.serialize("text/plain", "café") == "café".encode()
    assert default_registry.deserialize("image/png", b"\x89PNG") == b"\x89PNG"


def test_octet_stream_uses_pickle_only_when_flagged() -> None:
    """Native serialization should depend on the metadata flag."""
    meta = {PICKLE_META_KEY: "pickle"}
    payload = {"set": {1, 2}, "tuple": (1, 2)}

    body = default_registry.serialize("application/octet-stream", payload, meta)

    assert pickle.loads(body) == payload
    assert default_registry.deserialize("application/octet-stream", body, meta) == payload
    assert default_registry.deserialize("application/octet-stream", body) == body


def test_registered_entries_take_precedence() -> None:
    """Custom entries should win over defaults without changing the default registry."""
    registry = default_registry.copy()
    registry.register(r"json", lambda payload: b"custom", lambda body: "decoded")

    assert registry.serialize("application/json", {"a": 1}) == b"custom"
    assert registry.deserialize("application/json", b"{}") == "decoded"
    assert default_registry.deserialize("application/json", b"{}") == {}


def test_empty_registry_falls_back_to_passthrough() -> None:
    """A registry without entries should still handle any content type."""
    assert SerializerRegistry().deserialize("application/json", b"{}") == b"{}"


@pytest.mark.parametrize(
    ("content_type", "body"),
    [
        ("application/json", b"{broken"),
        ("text/yaml", b"key: [unclosed"),
        ("application/json", b"\xff"),
    ],
)
def test_undecodable_bodies_raise_invalid_response(content_type: str, body: bytes) -> None:
    """Bodies that do not decode as their content type should raise InvalidResponse."""
    with pytest.raises(InvalidResponse):
        default_registry.deserialize(content_type, body)
