"""Typed links between stored objects."""

import re
from collections.abc import Iterable
from urllib.parse import unquote

from pydantic import BaseModel

_LINK_PATTERN = re.compile(r'<([^>]+)>\s*;\s*(?:rel|riaktag)\s*=\s*"([^"]+)"')
_OBJECT_URL_PATTERN = re.compile(r"^/[^/]+/([^/]+)(?:/([^/]+))?/?$")


class Link(BaseModel, frozen=True):
    """A directed, tagged edge from one stored object to another."""

    url: str
    """Path of the target resource, e.g. "/riak/people/alice"."""

    rel: str
    """Relation tag, e.g. "up" or an association name."""

    def __init__(self, url: str, rel: str) -> None:
        super().__init__(url=url, rel=rel)

    @classmethod
    def parse(cls, header_value: str | None) -> list["Link"]:
        """Parse a Link header value into links, skipping malformed entries."""
        if not header_value:
            return []
        return [cls(url, rel) for url, rel in _LINK_PATTERN.findall(header_value)]

    @staticmethod
    def to_header(links: Iterable["Link"]) -> str:
        """Join links into a single Link header value."""
        return ", ".join(link.to_header_fragment() for link in links)

    @property
    def tag(self) -> str:
        return self.rel

    @property
    def bucket(self) -> str | None:
        """Bucket named by the target URL, if it points into a bucket."""
        match = _OBJECT_URL_PATTERN.match(self.url)
        return unquote(match.group(1)) if match else None

    @property
    def key(self) -> str | None:
        """Key named by the target URL, if it points at an object."""
        match = _OBJECT_URL_PATTERN.match(self.url)
        if match is None or match.group(2) is None:
            return None
        return unquote(match.group(2))

    def to_header_fragment(self) -> str:
        return f'<{self.url}>; rel="{self.rel}"'

    def __str__(self) -> str:
        return self.to_header_fragment()
