"""HTTP transport with automatic retries on rate limit errors (HTTP 429)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import aiohttp

from ._auth import Credential
from .const import (
    DEFAULT_TIMEOUT_SECONDS,
    HEADER_AUTHORIZATION,
    HEADER_CONTENT_TYPE,
)
from .exceptions import ApiConnectionError, TransportStateError
from .models import RawResponse, RequestDescriptor, RetryPolicy

_LOGGER = logging.getLogger(__name__)

_RATE_LIMITED = 429


async def _wait(delay_ms: int) -> None:
    await asyncio.sleep(delay_ms / 1000)


class RetryingTransport:
    """Sends requests through an aiohttp session, retrying on HTTP 429.

    Usage::

        async with RetryingTransport(Credential.bearer("key")) as transport:
            response = await transport.async_send(
                RequestDescriptor("GET", "https://api.example.com/v1/records")
            )

    The credential and any headers registered with :meth:`add_header` are
    sent with every request. Headers are frozen once the first request has
    been sent.

    If no session is provided, the transport creates its own on first use
    and closes it in :meth:`async_close`. A provided session is left to its
    owner.
    """

    def __init__(
        self,
        credential: Credential | None = None,
        *,
        session: aiohttp.ClientSession | None = None,
        retry_policy: RetryPolicy | None = None,
        headers: Mapping[str, str] | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
    ) -> None:
        self._owns_session = session is None
        self._session = session
        self._credential = credential or Credential()
        self._retry_policy = retry_policy or RetryPolicy()
        self._timeout = timeout or aiohttp.ClientTimeout(total=DEFAULT_TIMEOUT_SECONDS)
        self._headers: dict[str, str] = dict(headers or {})
        authorization = self._credential.authorization_header()
        if authorization is not None:
            self._headers[HEADER_AUTHORIZATION] = authorization
        self._started = False
        self._closed = False
        self._in_flight = 0

    async def __aenter__(self) -> RetryingTransport:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.async_close()

    @property
    def retry_policy(self) -> RetryPolicy:
        """The default retry policy for requests sent by this transport."""
        return self._retry_policy

    @property
    def default_headers(self) -> Mapping[str, str]:
        """Headers sent with every request (a copy)."""
        return dict(self._headers)

    @property
    def closed(self) -> bool:
        return self._closed

    def add_header(self, name: str, value: str) -> None:
        """Register a static header sent with every request.

        Raises:
            TransportStateError: If a request has already been sent or the
                transport is closed.
        """
        if self._started or self._closed:
            raise TransportStateError(
                "Headers must be registered before the first request"
            )
        self._headers[name] = value

    async def async_close(self) -> None:
        """Close the HTTP session if the transport owns it.

        Raises:
            TransportStateError: If requests are still in flight.
        """
        if self._in_flight:
            raise TransportStateError(
                f"Cannot close transport with {self._in_flight} request(s) in flight"
            )
        if self._closed:
            return
        self._closed = True
        if self._owns_session and self._session is not None:
            await self._session.close()

    async def async_send(
        self,
        request: RequestDescriptor,
        *,
        retry_policy: RetryPolicy | None = None,
        timeout: aiohttp.ClientTimeout | None = None,
    ) -> RawResponse:
        """Send a request, retrying while the server answers 429.

        The last response is always returned, including a 429 once the
        retries are exhausted. Each call keeps its own retry counter.

        Args:
            request: The request to send.
            retry_policy: Overrides the transport's policy for this call.
            timeout: Overrides the transport's timeout for each attempt.

        Raises:
            ApiConnectionError: On network errors and timeouts. These are
                never retried.
            TransportStateError: If the transport is closed.
        """
        if self._closed:
            raise TransportStateError("Transport is closed")
        policy = retry_policy or self._retry_policy
        self._started = True
        self._in_flight += 1
        try:
            response = await self._send_once(request, timeout)
            retries = 0
            for delay_ms in policy.delays_ms():
                if not (policy.enabled and request.url and response.status == _RATE_LIMITED):
                    break
                retries += 1
                _LOGGER.warning(
                    "Rate limited on %s %s, retry %d/%d in %d ms",
                    request.method,
                    request.url,
                    retries,
                    policy.max_retries,
                    delay_ms,
                )
                await _wait(delay_ms)
                response = await self._send_once(request.for_resend(), timeout)
            if response.status == _RATE_LIMITED and policy.enabled and retries == policy.max_retries:
                _LOGGER.info(
                    "Still rate limited on %s %s after %d retries",
                    request.method,
                    request.url,
                    retries,
                )
            return response
        finally:
            self._in_flight -= 1

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _send_once(
        self,
        request: RequestDescriptor,
        timeout: aiohttp.ClientTimeout | None,
    ) -> RawResponse:
        headers = dict(self._headers)
        if request.content_type is not None:
            headers[HEADER_CONTENT_TYPE] = request.content_type

        _LOGGER.debug("Sending %s %s", request.method, request.url)
        try:
            async with self._get_session().request(
                request.method,
                request.url,
                headers=headers,
                data=request.body,
                timeout=timeout or self._timeout,
            ) as resp:
                body = await resp.read()
                return RawResponse(
                    method=request.method,
                    url=request.url,
                    status=resp.status,
                    headers=resp.headers,
                    body=body,
                    charset=resp.charset,
                )
        except (aiohttp.ClientError, asyncio.TimeoutError) as err:
            raise ApiConnectionError(
                f"Connection error on {request.method} {request.url}: {err!r}"
            ) from err
