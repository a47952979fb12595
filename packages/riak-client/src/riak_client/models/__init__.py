"""Value types shared by the client, the backends and the object model."""

from riak_client.models.contexts import IndexCollection
from riak_client.models.datatypes import Part, Response
from riak_client.models.params import IndexOptions

__all__ = [
    # Contexts (store-issued state)
    "IndexCollection",
    # Params (query configuration)
    "IndexOptions",
    # Data types
    "Part",
    "Response",
]
