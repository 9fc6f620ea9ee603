"""Constants for the web API client."""

__version__ = "0.1.0"

MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 2000
BACKOFF_FACTOR = 2

DEFAULT_TIMEOUT_SECONDS = 30.0

HEADER_AUTHORIZATION = "Authorization"
HEADER_CONTENT_TYPE = "Content-Type"

CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_FORM = "application/x-www-form-urlencoded"

SUCCESS_STATUSES = frozenset({200, 204})


class HttpMethod:
    """HTTP methods accepted by the request pipeline."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
