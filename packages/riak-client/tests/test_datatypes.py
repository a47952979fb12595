"""Unit tests for transport data types."""

from __future__ import annotations

from riak_client import Response


def test_header_names_are_lower_cased_and_merged() -> None:
    """Header names differing only in case should share one ordered entry."""
    response = Response(
        headers={"Link": ['<a>; rel="x"'], "link": ['<b>; rel="y"'], "ETag": "abc"},
    )

    assert response.headers == {"link": ['<a>; rel="x"', '<b>; rel="y"'], "etag": ["abc"]}
    assert response.header("LINK") == '<a>; rel="x"'
    assert response.header("etag") == "abc"
