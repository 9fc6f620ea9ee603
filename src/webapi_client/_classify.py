"""Map HTTP responses onto the error taxonomy."""

from __future__ import annotations

import json
import logging

from .const import SUCCESS_STATUSES
from .exceptions import UnrecognizedStatusError
from .models import ErrorDetail, ErrorKind, ErrorOutcome, RawResponse

_LOGGER = logging.getLogger(__name__)


def read_error_detail(response: RawResponse) -> str | None:
    """Extract ``error.message`` from a 422 body.

    Returns None for an empty or malformed body, or when ``error.type`` is
    missing.
    """
    content = response.text()
    if not content:
        return None
    try:
        data = json.loads(content)
    except (ValueError, RecursionError):
        _LOGGER.debug("Unparseable error body from %s", response.url)
        return None
    detail = ErrorDetail.from_api_response(data)
    return detail.message if detail is not None else None


def classify_response(response: RawResponse) -> ErrorOutcome | None:
    """Classify a response.

    Returns:
        None on 200/204, otherwise the outcome for the status code. Only a
        422 reads the body.

    Raises:
        UnrecognizedStatusError: If the status code is outside the taxonomy.
    """
    status = response.status
    if status in SUCCESS_STATUSES:
        return None
    try:
        kind = ErrorKind(status)
    except ValueError:
        raise UnrecognizedStatusError(status) from None

    detail = read_error_detail(response) if kind is ErrorKind.INVALID_REQUEST else None
    outcome = ErrorOutcome.for_kind(kind, detail)
    _LOGGER.debug("%s %s classified as %s", response.method, response.url, kind.name)
    return outcome
