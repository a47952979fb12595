"""Content-type driven serialization of object payloads.

A `SerializerRegistry` maps content-type patterns to (dump, load) pairs.
Entries registered later take precedence, so applications can add or
replace formats without subclassing `RObject`:

    registry = default_registry.copy()
    registry.register(r"^application/x-msgpack", msgpack.packb, msgpack.unpackb)
"""

import json
import pickle
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

import yaml

from riak_client.errors import InvalidResponse

Dump: TypeAlias = Callable[[Any], bytes]
Load: TypeAlias = Callable[[bytes], Any]
MetaPredicate: TypeAlias = Callable[[Mapping[str, str]], bool]

PICKLE_META_KEY = "python-serialization"
"""Metadata entry that marks an octet-stream payload as pickled."""

PICKLE_META_VALUE = "pickle"


@dataclass(frozen=True, slots=True)
class Serializer:
    """One registry entry."""

    pattern: re.Pattern[str]
    dump: Dump
    load: Load
    when: MetaPredicate | None = None

    def applies(self, content_type: str, meta: Mapping[str, str]) -> bool:
        if not self.pattern.search(content_type):
            return False
        return self.when is None or self.when(meta)


def _to_bytes(payload: Any) -> bytes:
    if isinstance(payload, bytes | bytearray | memoryview):
        return bytes(payload)
    if payload is None:
        return b""
    return str(payload).encode("utf-8")


def _passthrough(body: bytes) -> bytes:
    return body


PASSTHROUGH = Serializer(re.compile(""), _to_bytes, _passthrough)
"""Fallback used when no registered entry matches."""


class SerializerRegistry:
    """Ordered content-type to serializer mapping with a pass-through fallback."""

    __slots__ = ("_entries",)

    def __init__(self, entries: list[Serializer] | None = None) -> None:
        self._entries: list[Serializer] = list(entries or [])

    def register(
        self,
        pattern: str | re.Pattern[str],
        dump: Dump,
        load: Load,
        *,
        when: MetaPredicate | None = None,
    ) -> None:
        """Add an entry that takes precedence over every existing one."""
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        self._entries.insert(0, Serializer(compiled, dump, load, when))

    def lookup(self, content_type: str | None, meta: Mapping[str, str] | None = None) -> Serializer:
        """Return the entry for a content type, or the pass-through fallback."""
        content_type = content_type or ""
        meta = meta or {}
        for entry in self._entries:
            if entry.applies(content_type, meta):
                return entry
        return PASSTHROUGH

    def serialize(
        self, content_type: str | None, payload: Any, meta: Mapping[str, str] | None = None
    ) -> bytes:
        return self.lookup(content_type, meta).dump(payload)

    def deserialize(
        self, content_type: str | None, body: bytes, meta: Mapping[str, str] | None = None
    ) -> Any:
        """Decode a body, raising `InvalidResponse` when it does not match its content type."""
        try:
            return self.lookup(content_type, meta).load(body)
        except (ValueError, EOFError, yaml.YAMLError, pickle.UnpicklingError) as e:
            raise InvalidResponse(
                {"content-type": [content_type or ""]},
                {},
                f"with an undecodable {content_type} body: {e}",
            ) from e

    def copy(self) -> "SerializerRegistry":
        return SerializerRegistry(self._entries)


def _json_dump(payload: Any) -> bytes:
    return json.dumps(payload).encode("utf-8")


def _yaml_dump(payload: Any) -> bytes:
    return yaml.safe_dump(payload).encode("utf-8")


def _pickled(meta: Mapping[str, str]) -> bool:
    return meta.get(PICKLE_META_KEY) == PICKLE_META_VALUE


def _build_default() -> SerializerRegistry:
    registry = SerializerRegistry()
    # Pickle only applies to trusted stores: loading runs arbitrary code.
    registry.register(r"^application/octet-stream$", pickle.dumps, pickle.loads, when=_pickled)
    registry.register(r"yaml", _yaml_dump, yaml.safe_load)
    registry.register(r"json", _json_dump, json.loads)
    return registry


default_registry = _build_default()
"""Registry used by `RObject` unless an instance is given its own."""
