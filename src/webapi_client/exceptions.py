"""Exception hierarchy for the web API client.

Recognized HTTP error statuses are not raised; they are returned as
:class:`~webapi_client.models.ErrorOutcome` values. Everything below is
raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ErrorOutcome


class WebApiError(Exception):
    """Base exception for all web API client errors."""


class ArgumentValidationError(WebApiError, ValueError):
    """Request arguments failed validation before anything was sent."""


class PayloadEncodingError(ArgumentValidationError):
    """Request content cannot be encoded as a flat form body."""


class RetryPolicyError(WebApiError, ValueError):
    """Retry configuration is out of range."""


class TransportStateError(WebApiError, RuntimeError):
    """Transport used in a state that does not allow the operation."""


class ApiConnectionError(WebApiError):
    """API is unreachable (network error, DNS, timeout)."""


class ApiResponseError(WebApiError):
    """API returned an error response.

    Attributes:
        status_code: HTTP status code, if available.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnrecognizedStatusError(ApiResponseError):
    """API returned a status code outside the known error taxonomy."""

    name = "Unrecognized Error"

    def __init__(self, status_code: int) -> None:
        self.message = f"Web returned HTTP status code {status_code}"
        super().__init__(
            f"{self.name} ({status_code}): {self.message}", status_code=status_code
        )


class ApiOutcomeError(ApiResponseError):
    """A classified error outcome, raised on request.

    Attributes:
        outcome: The :class:`ErrorOutcome` that was raised.
    """

    def __init__(self, outcome: ErrorOutcome) -> None:
        super().__init__(str(outcome), status_code=outcome.status_code)
        self.outcome = outcome
