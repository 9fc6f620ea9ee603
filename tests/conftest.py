"""Shared fixtures: a scripted local API server and captured backoff delays.

The server is a real ``aiohttp.web`` application served by ``TestServer``.
Responses are queued per path; once a path's queue is empty its last
response keeps being served.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: str
    headers: dict[str, str]
    body: bytes


@dataclass
class _Reply:
    status: int
    body: bytes
    content_type: str


@dataclass
class ScriptedApi:
    """Serves queued replies and records every request it receives."""

    server: TestServer | None = None
    requests: list[RecordedRequest] = field(default_factory=list)
    hold: asyncio.Event | None = None
    _replies: dict[str, list[_Reply]] = field(default_factory=dict)

    def queue(
        self,
        path: str,
        status: int,
        body: str | bytes = b"",
        content_type: str = "application/json",
    ) -> None:
        if isinstance(body, str):
            body = body.encode()
        self._replies.setdefault(path, []).append(_Reply(status, body, content_type))

    def url(self, path: str) -> str:
        assert self.server is not None
        return str(self.server.make_url(path))

    def requests_to(self, path: str) -> list[RecordedRequest]:
        return [r for r in self.requests if r.path == path]

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append(
            RecordedRequest(
                method=request.method,
                path=request.path,
                query=request.query_string,
                headers=dict(request.headers),
                body=await request.read(),
            )
        )
        if self.hold is not None:
            await self.hold.wait()
        replies = self._replies.get(request.path) or [_Reply(200, b"", "text/plain")]
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        return web.Response(
            status=reply.status, body=reply.body, content_type=reply.content_type
        )


@pytest.fixture
async def api():
    scripted = ScriptedApi()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", scripted.handle)
    server = TestServer(app)
    await server.start_server()
    scripted.server = server
    yield scripted
    await server.close()


@pytest.fixture
def recorded_delays(monkeypatch) -> list[int]:
    """Replace the backoff wait with a recorder that returns immediately."""
    delays: list[int] = []

    async def _fake_wait(delay_ms: int) -> None:
        delays.append(delay_ms)

    monkeypatch.setattr("webapi_client._transport._wait", _fake_wait)
    return delays
