"""Unit tests for WalkSpec normalization and rendering."""

from __future__ import annotations

import pytest

from riak_client import Link, PreconditionError, WalkSpec


def test_bucket_only_filter_renders_wildcards() -> None:
    """A bucket-only filter should leave tag and keep as wildcards."""
    (spec,) = WalkSpec.normalize({"bucket": "foo"})

    assert spec.to_path_segment() == "foo,_,_"


def test_tag_and_keep_filter_renders_keep_flag() -> None:
    """A kept hop should render its keep flag as 1."""
    (spec,) = WalkSpec.normalize({"tag": "t", "keep": True})

    assert str(spec) == "_,t,1"


@pytest.mark.parametrize("wildcard", [None, "", "_"])
def test_empty_filters_become_wildcards(wildcard: str | None) -> None:
    """Empty and explicit wildcard filters should render the same way."""
    spec = WalkSpec(bucket=wildcard, tag=wildcard)

    assert spec.bucket is None
    assert spec.tag is None
    assert spec.to_path_segment() == "_,_,_"


def test_normalize_preserves_order_across_argument_styles() -> None:
    """Specs, mappings and positional triples should keep caller order."""
    first = WalkSpec(bucket="people")
    specs = WalkSpec.normalize(first, {"tag": "friend"}, "pets", "owns", True)

    assert [str(spec) for spec in specs] == ["people,_,_", "_,friend,_", "pets,owns,1"]
    assert specs[0] is first


def test_normalize_flattens_nested_lists() -> None:
    """Nested lists of hops should be flattened in order."""
    specs = WalkSpec.normalize([{"bucket": "a"}, [{"bucket": "b"}, ("c", None, False)]])

    assert [spec.bucket for spec in specs] == ["a", "b", "c"]


def test_keyword_arguments_form_a_hop() -> None:
    """Keyword filters should become one more hop."""
    specs = WalkSpec.normalize({"bucket": "a"}, tag="friend", keep=True)

    assert [str(spec) for spec in specs] == ["a,_,_", "_,friend,1"]


def test_too_few_positional_arguments_fail() -> None:
    """Positional hops need bucket, tag and keep."""
    with pytest.raises(PreconditionError):
        WalkSpec.normalize("people", "friend")


def test_filters_are_escaped() -> None:
    """Bucket and tag should be escaped for use in a path."""
    assert WalkSpec(bucket="my bucket", tag="a/b").to_path_segment() == "my%20bucket,a%2Fb,_"


def test_matches_link_filters() -> None:
    """A spec should match links passing both of its filters."""
    link = Link("/riak/people/alice", "friend")

    assert WalkSpec().matches(link)
    assert WalkSpec(bucket="people", tag="friend").matches(link)
    assert not WalkSpec(bucket="pets").matches(link)
    assert not WalkSpec(tag="enemy").matches(link)
