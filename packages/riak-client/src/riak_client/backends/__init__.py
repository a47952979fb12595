"""Transport implementations.

Each backend implements the `riak_client.protocols.Transport` protocol.

Available backends:
- http: HTTP via httpx
"""

from riak_client.backends.http import HttpBackend

__all__ = [
    "HttpBackend",
]
