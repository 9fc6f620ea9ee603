"""Base class for web API clients."""

from __future__ import annotations

import abc
import logging
from collections.abc import Callable, Mapping
from typing import Any, Generic, TypeVar

import aiohttp
from yarl import URL

from ._auth import Credential
from ._classify import classify_response
from ._serialization import encode_form, to_form_fields
from ._transport import RetryingTransport
from .const import CONTENT_TYPE_FORM, HttpMethod
from .exceptions import ArgumentValidationError
from .models import ApiResponse, RawResponse, RequestDescriptor, RetryPolicy

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class WebApiArguments:
    """Arguments of one web API call.

    Subclasses set ``api_call_type`` and extend :meth:`validate` with their
    own checks.
    """

    api_call_type: Any = None

    def validate(self) -> None:
        """Check the arguments before anything is sent.

        Raises:
            ArgumentValidationError: If ``api_call_type`` is not set.
        """
        if self.api_call_type is None:
            raise ArgumentValidationError(
                "api_call_type must be defined for the current API"
            )


ArgsT = TypeVar("ArgsT", bound=WebApiArguments)


def merge_query(existing: str, fragment: str) -> str:
    """Append ``fragment`` to a query string.

    An empty query becomes ``fragment``; otherwise the leading ``?`` is
    dropped and the parts are joined with ``&``.
    """
    if not existing:
        return fragment
    if existing.startswith("?"):
        existing = existing[1:]
    return f"{existing}&{fragment}"


def with_query_fragment(url: str | URL, fragment: str) -> URL:
    """Return ``url`` with ``fragment`` appended to its query string."""
    url = URL(url)
    return url.with_query(merge_query(url.raw_query_string, fragment))


class WebApiClient(abc.ABC, Generic[ArgsT]):
    """Async base client for a JSON/form web API.

    Subclasses implement :meth:`build_uri` for their endpoints::

        class RecordsClient(WebApiClient[RecordArguments]):
            def build_uri(self, args: RecordArguments) -> URL:
                return URL(self.base_url) / "records" / args.table

        async with RecordsClient("https://api.example.com", token="key") as client:
            response = await client.async_send_request(HttpMethod.GET, args)
            error = classify_response(response)

    The client owns the transport it creates and closes it in
    :meth:`async_close`. A transport passed in is left to its owner.
    """

    def __init__(
        self,
        base_url: str,
        credential: Credential | None = None,
        *,
        token: str | None = None,
        user: str | None = None,
        password: str | None = None,
        transport: RetryingTransport | None = None,
        session: aiohttp.ClientSession | None = None,
        retry_policy: RetryPolicy | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> None:
        self.base_url = base_url
        if credential is None:
            if token is not None:
                credential = Credential.bearer(token)
            elif user is not None:
                credential = Credential.basic(user, password or "")
        self._owns_transport = transport is None
        self._transport = transport or RetryingTransport(
            credential,
            session=session,
            retry_policy=retry_policy,
            headers=headers,
        )

    async def __aenter__(self) -> WebApiClient[ArgsT]:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.async_close()

    @property
    def transport(self) -> RetryingTransport:
        return self._transport

    @property
    def retry_if_rate_limited(self) -> bool:
        """Whether 429 responses are retried."""
        return self._transport.retry_policy.enabled

    @property
    def delay_ms_if_rate_limited(self) -> int:
        """Delay before the first retry after a 429, in milliseconds."""
        return self._transport.retry_policy.base_delay_ms

    async def async_close(self) -> None:
        """Close the transport if the client owns it."""
        if self._owns_transport:
            await self._transport.async_close()

    @abc.abstractmethod
    def build_uri(self, args: ArgsT) -> str | URL:
        """Build the request URI for ``args``."""

    # ------------------------------------------------------------------ #
    #  Requests
    # ------------------------------------------------------------------ #

    async def async_send_request(
        self,
        method: str,
        args: ArgsT,
        content: Any = None,
    ) -> RawResponse:
        """Validate, build and send one request.

        The response is returned unclassified; pass it to
        :func:`classify_response`.

        Args:
            method: HTTP method, see :class:`HttpMethod`.
            args: Call arguments, validated before anything is sent.
            content: Optional flat payload sent as a form body.

        Raises:
            ArgumentValidationError: If ``args`` are invalid.
            PayloadEncodingError: If ``content`` is not a flat object.
            ApiConnectionError: On network errors.
        """
        args.validate()
        uri = self.build_uri(args)

        body: bytes | None = None
        content_type: str | None = None
        if content is not None:
            body = encode_form(to_form_fields(content))
            content_type = CONTENT_TYPE_FORM

        request = RequestDescriptor(
            method=method, url=str(uri), body=body, content_type=content_type
        )
        return await self._transport.async_send(request)

    async def async_fetch(
        self,
        method: str,
        args: ArgsT,
        parse: Callable[[RawResponse], T],
        content: Any = None,
    ) -> ApiResponse[T]:
        """Send a request and wrap the result.

        Recognized error statuses become ``ApiResponse.failed``; on success
        ``parse`` turns the response into records.

        Raises:
            UnrecognizedStatusError: If the status code is outside the
                taxonomy.
        """
        response = await self.async_send_request(method, args, content)
        error = classify_response(response)
        if error is not None:
            return ApiResponse.failed(error)
        return ApiResponse.ok(parse(response))

    async def async_get_raw_text(self, url: str | URL) -> str:
        """GET ``url`` and return the body, or the rendered error outcome.

        Raises:
            UnrecognizedStatusError: If the status code is outside the
                taxonomy.
        """
        request = RequestDescriptor(method=HttpMethod.GET, url=str(url))
        response = await self._transport.async_send(request)
        error = classify_response(response)
        if error is not None:
            _LOGGER.debug("GET %s failed: %s", url, error.name)
            return str(error)
        return response.text()
