"""Data types exchanged with the transport.

- `Response` for a complete HTTP response, or one part of a multipart body
- `Part` for the nested result of multipart parsing
"""

from collections.abc import Mapping
from typing import Any, TypeAlias

from pydantic import BaseModel, Field, field_validator


class Response(BaseModel):
    """An HTTP response, or a single part of a multipart body."""

    status: int = 200
    """Status code. Multipart parts carry no status of their own."""

    headers: dict[str, list[str]] = Field(default_factory=dict)
    """Header values keyed by lower-cased header name, in received order."""

    body: bytes = b""
    """Raw response body."""

    @field_validator("headers", mode="before")
    @classmethod
    def _lower_names(cls, value: Any) -> Any:
        if not isinstance(value, Mapping):
            return value
        merged: dict[str, list[str]] = {}
        for name, values in value.items():
            items = [values] if isinstance(values, str) else list(values)
            merged.setdefault(str(name).lower(), []).extend(items)
        return merged

    def header(self, name: str) -> str | None:
        """Return the first value of a header, if present."""
        values = self.headers.get(name.lower())
        return values[0] if values else None


# A multipart section is either a leaf part or a nested multipart section.
Part: TypeAlias = Response | list["Part"]
