"""HTTP client for the authorization (token) service."""

from __future__ import annotations

import re
from typing import Protocol

import httpx
from pydantic import BaseModel, ValidationError

from pubflow.pipeline.errors import TokenCheckError

_HTTPS = re.compile(r"^https:", re.IGNORECASE)
_HTTP = re.compile(r"^http:", re.IGNORECASE)


class AuthorizationReport(BaseModel):
    authorized: bool
    source: str


class TokenCheckerProtocol(Protocol):
    async def check(self, version: str, token: str) -> AuthorizationReport: ...


def source_matches(source: str, url: str) -> bool:
    """
    True if ``url`` lives under ``source`` regardless of http/https.

        >>> source_matches("https://example.org/tr/x", "http://example.org/tr/x/foo")
        True
    """
    as_http = _HTTPS.sub("http:", source, count=1)
    as_https = _HTTP.sub("https:", source, count=1)
    return url.startswith(as_http) or url.startswith(as_https)


class TokenChecker:
    """Checks that a token grants publication rights for a document version."""

    def __init__(self, http_client: httpx.AsyncClient, token_checker_url: str) -> None:
        self._client = http_client
        self._url = token_checker_url

    async def check(self, version: str, token: str) -> AuthorizationReport:
        try:
            response = await self._client.get(
                self._url,
                params={"version": version, "token": token},
            )
            response.raise_for_status()
            return AuthorizationReport.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise TokenCheckError(f"Token checker request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise TokenCheckError(f"Token checker returned an invalid report: {exc}") from exc
