"""Error types for client operations."""

from collections.abc import Collection, Mapping, Sequence
from enum import StrEnum


class ErrorKind(StrEnum):
    """Classification of client errors."""

    CONNECTION = "connection"
    NOT_FOUND = "not_found"
    REQUEST_FAILED = "request_failed"
    INVALID_RESPONSE = "invalid_response"
    PRECONDITION = "precondition"
    TIMEOUT = "timeout"


class RiakError(Exception):
    """Base error for all client operations."""

    __slots__ = ("kind", "message", "source")

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.REQUEST_FAILED,
        source: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.source = source

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, kind={self.kind!r})"


class FailedRequest(RiakError):
    """The store answered with a status outside the expected set."""

    __slots__ = ("body", "code", "expected", "headers", "method")

    def __init__(
        self,
        method: str,
        expected: Collection[int],
        code: int,
        headers: Mapping[str, Sequence[str]],
        body: bytes,
    ) -> None:
        self.method = method.upper()
        self.expected = tuple(sorted(expected))
        self.code = code
        self.headers = dict(headers)
        self.body = body
        kind = ErrorKind.NOT_FOUND if code == 404 else ErrorKind.REQUEST_FAILED
        expected_str = ", ".join(str(c) for c in self.expected)
        msg = (
            f"Expected {expected_str} from {self.method} but received {code}: "
            f"{body[:200].decode('utf-8', errors='replace')}"
        )
        super().__init__(msg, kind=kind)

    @property
    def not_found(self) -> bool:
        """Whether the requested resource does not exist."""
        return self.code == 404


class InvalidResponse(RiakError):
    """A response did not have the shape the operation required."""

    __slots__ = ("actual", "context", "expected")

    def __init__(
        self,
        expected: Mapping[str, Sequence[str]],
        actual: Mapping[str, Sequence[str]],
        context: str = "",
    ) -> None:
        self.expected = dict(expected)
        self.actual = dict(actual)
        self.context = context
        msg = f"Expected response headers {self.expected} but received {self.actual}"
        if context:
            msg = f"{msg} {context}"
        super().__init__(msg, kind=ErrorKind.INVALID_RESPONSE)


class PreconditionError(RiakError):
    """The caller used the API in a way it does not support."""

    __slots__ = ()

    def __init__(self, message: str) -> None:
        super().__init__(message, kind=ErrorKind.PRECONDITION)
