"""
DocumentRetriever: fetches the submitted document into temp storage.

Archives (tar, tar.gz, zip) are unpacked into the temp location; any
other payload is treated as a single HTML document and stored as
``Overview.html``.
"""

from __future__ import annotations

import io
import os
import tarfile
import zipfile
from typing import Protocol

import httpx

from pubflow.core.logging import get_logger
from pubflow.pipeline.errors import RetrievalError

logger = get_logger(__name__)

DEFAULT_DOCUMENT_NAME = "Overview.html"

TAR_CONTENT_TYPES = {
    "application/x-tar",
    "application/gzip",
    "application/x-gzip",
    "application/x-compressed-tar",
}
ZIP_CONTENT_TYPES = {"application/zip", "application/x-zip-compressed"}


class Retriever(Protocol):
    async def fetch_and_install(self, url: str, temp_location: str) -> None: ...


def _within(directory: str, target: str) -> bool:
    directory = os.path.realpath(directory)
    target = os.path.realpath(target)
    return os.path.commonpath([directory, target]) == directory


class DocumentRetriever:
    """Downloads a document or archive over HTTP and installs it locally."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        self._client = http_client

    async def fetch_and_install(self, url: str, temp_location: str) -> None:
        try:
            response = await self._client.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise RetrievalError(f"Could not fetch {url}: {exc}") from exc

        os.makedirs(temp_location, exist_ok=True)
        content_type = response.headers.get("content-type", "").split(";")[0].strip()
        path = httpx.URL(url).path.lower()

        if content_type in TAR_CONTENT_TYPES or path.endswith((".tar", ".tar.gz", ".tgz")):
            self._extract_tar(response.content, temp_location)
            kind = "tar"
        elif content_type in ZIP_CONTENT_TYPES or path.endswith(".zip"):
            self._extract_zip(response.content, temp_location)
            kind = "zip"
        else:
            target = os.path.join(temp_location, DEFAULT_DOCUMENT_NAME)
            with open(target, "wb") as fh:
                fh.write(response.content)
            kind = "document"

        logger.info(
            "Document retrieved",
            url=url,
            temp_location=temp_location,
            kind=kind,
            size=len(response.content),
        )

    def _extract_tar(self, payload: bytes, temp_location: str) -> None:
        try:
            with tarfile.open(fileobj=io.BytesIO(payload), mode="r:*") as archive:
                for member in archive.getmembers():
                    if member.issym() or member.islnk():
                        raise RetrievalError(f"Links are not allowed in archives: {member.name}")
                    if not _within(temp_location, os.path.join(temp_location, member.name)):
                        raise RetrievalError(f"Archive member escapes target: {member.name}")
                archive.extractall(temp_location, filter="data")
        except tarfile.TarError as exc:
            raise RetrievalError(f"Invalid tar archive: {exc}") from exc

    def _extract_zip(self, payload: bytes, temp_location: str) -> None:
        try:
            with zipfile.ZipFile(io.BytesIO(payload)) as archive:
                for name in archive.namelist():
                    if not _within(temp_location, os.path.join(temp_location, name)):
                        raise RetrievalError(f"Archive member escapes target: {name}")
                archive.extractall(temp_location)
        except zipfile.BadZipFile as exc:
            raise RetrievalError(f"Invalid zip archive: {exc}") from exc
