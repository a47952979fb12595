"""Client library for the Riak key-value store's HTTP interface."""

import logging

from riak_client.bucket import Bucket
from riak_client.client import Client
from riak_client.config import ClientSettings
from riak_client.errors import (
    ErrorKind,
    FailedRequest,
    InvalidResponse,
    PreconditionError,
    RiakError,
)
from riak_client.link import Link
from riak_client.models import IndexCollection, IndexOptions, Response
from riak_client.protocols import Transport
from riak_client.robject import RObject
from riak_client.secondary_index import SecondaryIndex
from riak_client.serializers import SerializerRegistry
from riak_client.walk_spec import WalkSpec

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Bucket",
    "Client",
    "ClientSettings",
    "ErrorKind",
    "FailedRequest",
    "IndexCollection",
    "IndexOptions",
    "InvalidResponse",
    "Link",
    "PreconditionError",
    "RObject",
    "Response",
    "RiakError",
    "SecondaryIndex",
    "SerializerRegistry",
    "Transport",
    "WalkSpec",
]
