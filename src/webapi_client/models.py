"""Data models for requests, responses and classified outcomes."""

from __future__ import annotations

import codecs
import enum
import json
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Generic, TypeVar

from .const import (
    BACKOFF_FACTOR,
    CONTENT_TYPE_JSON,
    DEFAULT_RETRY_DELAY_MS,
    MAX_RETRIES,
)
from .exceptions import ApiOutcomeError, RetryPolicyError

T = TypeVar("T")


class ErrorKind(enum.IntEnum):
    """Recognized error kinds.

    Values are the HTTP status codes they classify.
    """

    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    PAYMENT_REQUIRED = 402
    FORBIDDEN = 403
    NOT_FOUND = 404
    REQUEST_ENTITY_TOO_LARGE = 413
    INVALID_REQUEST = 422
    TOO_MANY_REQUESTS = 429
    GATEWAY_TIMEOUT = 504


_CANNED_TEXT: dict[ErrorKind, tuple[str, str]] = {
    ErrorKind.BAD_REQUEST: (
        "Bad Request",
        "The request encoding is invalid; the request can't be parsed as a valid JSON.",
    ),
    ErrorKind.UNAUTHORIZED: (
        "Unauthorized",
        "Accessing a protected resource without authorization or with invalid credentials.",
    ),
    ErrorKind.PAYMENT_REQUIRED: (
        "Payment Required",
        "The account associated with the API key making requests hits a quota "
        "that can be increased by upgrading the Web account plan.",
    ),
    ErrorKind.FORBIDDEN: (
        "Forbidden",
        "Accessing a protected resource with API credentials that don't have "
        "access to that resource.",
    ),
    ErrorKind.NOT_FOUND: (
        "Not Found",
        "Route or resource is not found. This error is returned when the request "
        "hits an undefined route, or if the resource doesn't exist "
        "(e.g. has been deleted).",
    ),
    ErrorKind.REQUEST_ENTITY_TOO_LARGE: (
        "Request Entity Too Large",
        "The request exceeded the maximum allowed payload size. You shouldn't "
        "encounter this under normal use.",
    ),
    ErrorKind.INVALID_REQUEST: (
        "Invalid Request",
        "The request data is invalid. This includes most of the base-specific "
        "validations.\nThe detail attribute contains the detailed error message string.",
    ),
    ErrorKind.TOO_MANY_REQUESTS: (
        "Too Many Requests",
        "The user has sent too many requests in a given amount of time (rate limiting).",
    ),
    ErrorKind.GATEWAY_TIMEOUT: (
        "Gateway Timeout",
        "The server, while acting as a gateway or proxy, did not receive a timely "
        "response from an upstream server it needed to access in order to "
        "complete the request.",
    ),
}


@dataclass(frozen=True)
class ErrorOutcome:
    """A classified failure of one API call.

    Only ``INVALID_REQUEST`` outcomes ever carry a ``detail``.
    """

    kind: ErrorKind
    status_code: int
    name: str
    message: str
    detail: str | None = None

    @classmethod
    def for_kind(cls, kind: ErrorKind, detail: str | None = None) -> ErrorOutcome:
        """Build the canned outcome for ``kind``."""
        name, message = _CANNED_TEXT[kind]
        if kind is not ErrorKind.INVALID_REQUEST:
            detail = None
        return cls(
            kind=kind,
            status_code=int(kind),
            name=name,
            message=message,
            detail=detail,
        )

    def __str__(self) -> str:
        return f"{self.name} ({self.status_code}): {self.message}"


@dataclass(frozen=True)
class ErrorDetail:
    """The ``error`` object of a 422 response body."""

    type: str
    message: str

    @classmethod
    def from_api_response(cls, data: Any) -> ErrorDetail | None:
        """Construct from a decoded 422 body, or None if the shape doesn't match."""
        if not isinstance(data, dict):
            return None
        error = data.get("error")
        if not isinstance(error, dict):
            return None
        error_type = error.get("type")
        message = error.get("message")
        if error_type is None or not isinstance(message, str):
            return None
        return cls(type=str(error_type), message=message)


@dataclass(frozen=True)
class RetryPolicy:
    """Rate-limit retry configuration for a transport.

    ``max_retries`` and ``backoff_factor`` are fixed. Use
    ``dataclasses.replace()`` to derive a modified policy; the delay guard
    runs again on the copy.
    """

    enabled: bool = True
    base_delay_ms: int = DEFAULT_RETRY_DELAY_MS
    max_retries: int = field(default=MAX_RETRIES, init=False)
    backoff_factor: int = field(default=BACKOFF_FACTOR, init=False)

    def __post_init__(self) -> None:
        if self.base_delay_ms < DEFAULT_RETRY_DELAY_MS:
            raise RetryPolicyError(
                f"Retry delay shouldn't be less than {DEFAULT_RETRY_DELAY_MS} ms "
                f"(got {self.base_delay_ms})"
            )

    def delays_ms(self) -> Iterator[int]:
        """Yield the wait before each retry, in milliseconds."""
        delay = self.base_delay_ms
        for _ in range(self.max_retries):
            yield delay
            delay *= self.backoff_factor


@dataclass(frozen=True)
class RequestDescriptor:
    """An outgoing request with its body already buffered.

    The body is kept as bytes so every resend is byte-identical to the
    first attempt.
    """

    method: str
    url: str
    body: bytes | None = None
    content_type: str | None = None

    def for_resend(self) -> RequestDescriptor:
        """Return a fresh descriptor for a retry attempt."""
        return replace(
            self,
            content_type=CONTENT_TYPE_JSON if self.body is not None else None,
        )


@dataclass(frozen=True)
class RawResponse:
    """A fully-read HTTP response."""

    method: str
    url: str
    status: int
    headers: Mapping[str, str]
    body: bytes = b""
    charset: str | None = None

    def text(self) -> str:
        """Decode the body, falling back to UTF-8 for missing or unknown charsets."""
        encoding = self.charset or "utf-8"
        try:
            codecs.lookup(encoding)
        except LookupError:
            encoding = "utf-8"
        return self.body.decode(encoding, errors="replace")

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.text())


@dataclass(frozen=True)
class ApiResponse(Generic[T]):
    """Result of a typed API call: records on success, an outcome on failure."""

    records: T | None = None
    error: ErrorOutcome | None = None

    @classmethod
    def ok(cls, records: T | None) -> ApiResponse[T]:
        return cls(records=records)

    @classmethod
    def failed(cls, error: ErrorOutcome) -> ApiResponse[T]:
        return cls(error=error)

    @property
    def success(self) -> bool:
        """Whether the API call succeeded."""
        return self.error is None

    def raise_for_error(self) -> T | None:
        """Return the records, or raise the outcome as :class:`ApiOutcomeError`."""
        if self.error is not None:
            raise ApiOutcomeError(self.error)
        return self.records
