"""
ThirdPartyChecker: scans a document for resources loaded from
origins that are not allowed.

Only resources the browser would actually fetch while rendering the
page are considered: plain ``<a href>`` links are ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from html.parser import HTMLParser
from typing import Iterable, Protocol
from urllib.parse import urljoin, urlsplit

import httpx

from pubflow.core.logging import get_logger
from pubflow.pipeline.errors import ThirdPartyCheckError

logger = get_logger(__name__)

# tag → attribute holding the resource URL
RESOURCE_ATTRIBUTES: dict[str, tuple[str, ...]] = {
    "img": ("src",),
    "script": ("src",),
    "iframe": ("src",),
    "video": ("src", "poster"),
    "audio": ("src",),
    "source": ("src",),
    "track": ("src",),
    "embed": ("src",),
    "object": ("data",),
    "link": ("href",),
}

# <link rel=...> values that cause a fetch
FETCHED_LINK_RELS = {"stylesheet", "icon", "shortcut", "preload", "prefetch", "manifest"}


@dataclass(frozen=True)
class Violation:
    """A resource loaded from a disallowed origin."""

    tag: str
    url: str

    def __str__(self) -> str:
        return f"Non-authorized resource in <{self.tag}>: {self.url}"


class ThirdPartyCheckerProtocol(Protocol):
    async def check(self, http_location: str) -> set[Violation]: ...


def _origin(url: str) -> str:
    parts = urlsplit(url)
    return f"{parts.scheme.lower()}://{parts.netloc.lower()}"


class _ResourceCollector(HTMLParser):
    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.resources: list[tuple[str, str]] = []

    def handle_starttag(self, tag, attrs):
        names = RESOURCE_ATTRIBUTES.get(tag)
        if not names:
            return
        values = dict(attrs)
        if tag == "link":
            rels = set((values.get("rel") or "").lower().split())
            if not rels & FETCHED_LINK_RELS:
                return
        for name in names:
            value = values.get(name)
            if value:
                self.resources.append((tag, value.strip()))

    handle_startendtag = handle_starttag


class ThirdPartyChecker:
    """Fetches the document and lists every non-allowed resource it loads."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        allowed_origins: Iterable[str] = (),
    ) -> None:
        self._client = http_client
        self._allowed = {_origin(o) for o in allowed_origins}

    async def check(self, http_location: str) -> set[Violation]:
        try:
            response = await self._client.get(http_location, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ThirdPartyCheckError(f"Could not load {http_location}: {exc}") from exc

        violations = self.scan(response.text, str(response.url))
        logger.info(
            "Third party resources scanned",
            http_location=http_location,
            violations=len(violations),
        )
        return violations

    def scan(self, html: str, base_url: str) -> set[Violation]:
        collector = _ResourceCollector()
        collector.feed(html)
        collector.close()

        allowed = self._allowed | {_origin(base_url)}
        violations = set()
        for tag, raw in collector.resources:
            url = urljoin(base_url, raw)
            if urlsplit(url).scheme.lower() not in ("http", "https"):
                continue
            if _origin(url) not in allowed:
                violations.add(Violation(tag=tag, url=url))
        return violations
