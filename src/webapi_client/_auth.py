"""Credentials injected into every request of a transport."""

from __future__ import annotations

import enum
from dataclasses import dataclass

import aiohttp


class AuthScheme(enum.Enum):
    """Supported ``Authorization`` schemes."""

    NONE = "none"
    BEARER = "Bearer"
    BASIC = "Basic"


@dataclass(frozen=True)
class Credential:
    """Authentication material for a transport.

    Build one with :meth:`bearer` or :meth:`basic`; the default instance
    sends no ``Authorization`` header.
    """

    scheme: AuthScheme = AuthScheme.NONE
    token: str | None = None
    user: str | None = None
    password: str | None = None

    @classmethod
    def bearer(cls, token: str) -> Credential:
        return cls(scheme=AuthScheme.BEARER, token=token)

    @classmethod
    def basic(cls, user: str, password: str) -> Credential:
        return cls(scheme=AuthScheme.BASIC, user=user, password=password)

    def authorization_header(self) -> str | None:
        """Render the ``Authorization`` header value, or None for no auth."""
        if self.scheme is AuthScheme.BEARER:
            return f"Bearer {self.token}"
        if self.scheme is AuthScheme.BASIC:
            return aiohttp.BasicAuth(self.user or "", self.password or "").encode()
        return None

    def __repr__(self) -> str:
        return f"Credential(scheme={self.scheme.name})"
