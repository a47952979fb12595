"""Secondary index queries with continuation-based paging."""

import logging
from typing import TYPE_CHECKING, Any, Self

from riak_client.errors import PreconditionError
from riak_client.models.contexts import IndexCollection
from riak_client.models.params import IndexOptions

if TYPE_CHECKING:
    from riak_client.bucket import Bucket
    from riak_client.client import IndexQuery

logger = logging.getLogger(__name__)


class SecondaryIndex:
    """A query for the keys whose index term equals a value or falls in a range.

    Capability checks against the connected server run at construction,
    before any query is issued. Results are fetched once, on first access.
    """

    def __init__(
        self,
        bucket: "Bucket",
        index: str,
        query: "IndexQuery",
        options: IndexOptions | None = None,
        **kwargs: Any,
    ) -> None:
        self.bucket = bucket
        self.client = bucket.client
        self.index = index
        self.query = query
        self.options = options.model_copy(update=kwargs) if options else IndexOptions(**kwargs)
        self._keys: IndexCollection | None = None
        self._values: list[Any] | None = None

        self._validate_options()

    def __repr__(self) -> str:
        return f"<SecondaryIndex {self.bucket.name}/{self.index} {self.query!r}>"

    def keys(self) -> IndexCollection:
        """The page of matching keys, fetched on first call."""
        if self._keys is None:
            self._keys = self.client.get_index(self.bucket, self.index, self.query, self.options)
        return self._keys

    def values(self) -> list[Any]:
        """The stored values of the matching keys, in key order."""
        if self._values is None:
            objects = self.bucket.get_many(self.keys())
            self._values = [robject.data for robject in objects.values()]
        return self._values

    def next_page(self) -> Self:
        """A new query for the page after this one."""
        continuation = self.keys().continuation
        if not continuation:
            msg = "No next page is available for this index query"
            raise PreconditionError(msg)
        return type(self)(
            self.bucket,
            self.index,
            self.query,
            self.options.model_copy(update={"continuation": continuation}),
        )

    def _validate_options(self) -> None:
        if self.options.stream:
            msg = "Streaming secondary index queries are not supported"
            raise PreconditionError(msg)
        if self.options.paginated and not self.client.index_pagination():
            logger.debug("Rejecting paginated index query on %s", self.client)
            msg = "Secondary index pagination is not available on this server"
            raise PreconditionError(msg)
        if self.options.return_terms and not self.client.index_return_terms():
            logger.debug("Rejecting return_terms index query on %s", self.client)
            msg = "Returning index terms is not available on this server"
            raise PreconditionError(msg)
