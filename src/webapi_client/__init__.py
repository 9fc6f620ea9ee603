"""Async foundation for JSON/form web API clients."""

from .const import __version__, HttpMethod
from ._auth import AuthScheme, Credential
from ._classify import classify_response, read_error_detail
from ._client import WebApiArguments, WebApiClient, merge_query, with_query_fragment
from ._serialization import encode_form, to_form_fields
from ._transport import RetryingTransport
from .exceptions import (
    ApiConnectionError,
    ApiOutcomeError,
    ApiResponseError,
    ArgumentValidationError,
    PayloadEncodingError,
    RetryPolicyError,
    TransportStateError,
    UnrecognizedStatusError,
    WebApiError,
)
from .models import (
    ApiResponse,
    ErrorDetail,
    ErrorKind,
    ErrorOutcome,
    RawResponse,
    RequestDescriptor,
    RetryPolicy,
)

__all__ = [
    "__version__",
    "HttpMethod",
    "AuthScheme",
    "Credential",
    "RetryingTransport",
    "WebApiArguments",
    "WebApiClient",
    "classify_response",
    "read_error_detail",
    "merge_query",
    "with_query_fragment",
    "encode_form",
    "to_form_fields",
    "ApiConnectionError",
    "ApiOutcomeError",
    "ApiResponseError",
    "ArgumentValidationError",
    "PayloadEncodingError",
    "RetryPolicyError",
    "TransportStateError",
    "UnrecognizedStatusError",
    "WebApiError",
    "ApiResponse",
    "ErrorDetail",
    "ErrorKind",
    "ErrorOutcome",
    "RawResponse",
    "RequestDescriptor",
    "RetryPolicy",
]
