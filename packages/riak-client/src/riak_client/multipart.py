"""Permissive parser for `multipart/mixed` bodies.

Sibling responses carry one part per sibling. Link-walk responses nest one
multipart section per hop, each holding one part per object reached, so
parsing recurses into any part that is itself `multipart/mixed`.

Malformed input never raises: sections that cannot be parsed are skipped
and described in the optional `diagnostics` list, so callers see fewer
parts rather than an error.
"""

import logging
import re

from riak_client.models.datatypes import Part, Response

logger = logging.getLogger(__name__)

_BOUNDARY_PATTERN = re.compile(
    r'multipart/mixed\s*;.*?\bboundary\s*=\s*(?:"([^"]+)"|([^\s;,]+))',
    re.IGNORECASE,
)
_BLANK_LINE = re.compile(rb"\r?\n\r?\n")
_LINE_END = re.compile(rb"\r?\n")


def extract_boundary(content_type: str | None) -> str | None:
    """Return the boundary of a multipart/mixed content type, if it declares one."""
    if not content_type:
        return None
    match = _BOUNDARY_PATTERN.search(content_type)
    if match is None:
        return None
    return match.group(1) or match.group(2)


def parse(
    body: bytes | str,
    boundary: str,
    diagnostics: list[str] | None = None,
) -> list[Part]:
    """Split a multipart body into parts, recursing into nested sections."""
    if isinstance(body, str):
        body = body.encode("utf-8")
    if not boundary:
        _note(diagnostics, "empty multipart boundary")
        return []

    delimiter = re.compile(
        rb"(?:\A|\r?\n)--"
        + re.escape(boundary.encode("utf-8"))
        + rb"(?=--|[ \t]*\r?\n|[ \t]*\Z)"
    )
    sections = delimiter.split(body)
    if len(sections) < 2:
        _note(diagnostics, f"boundary {boundary!r} not found in body")
        return []

    parts: list[Part] = []
    # The first section is the preamble, which carries nothing.
    for section in sections[1:]:
        if section.startswith(b"--"):
            break
        part = _parse_section(section, diagnostics)
        if part is None:
            continue
        nested = extract_boundary(part.header("content-type"))
        if nested is not None:
            parts.append(parse(part.body, nested, diagnostics))
        else:
            parts.append(part)
    return parts


def _parse_section(section: bytes, diagnostics: list[str] | None) -> Response | None:
    # The rest of the delimiter line is transport padding.
    lines = _LINE_END.split(section, maxsplit=1)
    if len(lines) < 2:
        _note(diagnostics, "multipart section without content")
        return None
    content = lines[1]

    if content.startswith((b"\r\n", b"\n")):
        raw_headers, body = b"", _LINE_END.split(content, maxsplit=1)[1]
    else:
        split = _BLANK_LINE.split(content, maxsplit=1)
        raw_headers = split[0]
        body = split[1] if len(split) > 1 else b""

    headers = _parse_headers(raw_headers)
    if headers is None:
        _note(diagnostics, f"unparsable multipart headers: {raw_headers[:80]!r}")
        return None
    return Response(headers=headers, body=body)


def _parse_headers(raw: bytes) -> dict[str, list[str]] | None:
    headers: dict[str, list[str]] = {}
    last: str | None = None
    for line in _LINE_END.split(raw.decode("latin-1")):
        if not line:
            continue
        if line[0] in " \t" and last is not None:
            headers[last][-1] = f"{headers[last][-1]} {line.strip()}"
            continue
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            return None
        last = name.strip().lower()
        headers.setdefault(last, []).append(value.strip())
    return headers


def _note(diagnostics: list[str] | None, message: str) -> None:
    logger.debug("Skipping multipart content: %s", message)
    if diagnostics is not None:
        diagnostics.append(message)
