"""
Publisher: submits a validated document's metadata to the publishing
service.

JsonHttpService wraps the authenticated JSON transport; Publisher
interprets the service's answer as a list of error records (an empty
list means the document was published).
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol

import httpx
from pydantic import BaseModel, ValidationError

from pubflow.core.logging import get_logger
from pubflow.pipeline.errors import PublishError

logger = get_logger(__name__)


class PublishErrorRecord(BaseModel):
    """One reason the publishing service rejected the document."""

    message: str
    field: str | None = None

    def __str__(self) -> str:
        return f"{self.field}: {self.message}" if self.field else self.message


class PublisherProtocol(Protocol):
    async def publish(self, metadata: Mapping[str, Any]) -> list[PublishErrorRecord]: ...


class JsonHttpService:
    """POSTs JSON documents to one endpoint with HTTP basic auth."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        username: str = "",
        password: str = "",
    ) -> None:
        self._client = http_client
        self.url = url
        self._auth = httpx.BasicAuth(username, password) if username else None

    async def post(self, payload: Mapping[str, Any]) -> httpx.Response:
        return await self._client.post(
            self.url,
            json=dict(payload),
            auth=self._auth,
            headers={"Accept": "application/json"},
        )


class Publisher:
    """Publishes document metadata through a JsonHttpService."""

    def __init__(self, service: JsonHttpService) -> None:
        self._service = service

    async def publish(self, metadata: Mapping[str, Any]) -> list[PublishErrorRecord]:
        try:
            response = await self._service.post(metadata)
        except httpx.HTTPError as exc:
            raise PublishError(f"Publishing service unreachable: {exc}") from exc

        if response.is_success:
            logger.info("Document published", url=self._service.url)
            return []

        if response.is_client_error:
            errors = self._parse_errors(response)
            if errors:
                logger.warning(
                    "Publishing service rejected the document",
                    status_code=response.status_code,
                    errors=[str(e) for e in errors],
                )
                return errors

        raise PublishError(
            f"Publishing service returned {response.status_code}",
            status_code=response.status_code,
            response_body=response.text,
        )

    @staticmethod
    def _parse_errors(response: httpx.Response) -> list[PublishErrorRecord]:
        try:
            body = response.json()
        except ValueError:
            return []
        if not isinstance(body, dict) or not isinstance(body.get("errors"), list):
            return []
        records = []
        for item in body["errors"]:
            try:
                if isinstance(item, str):
                    records.append(PublishErrorRecord(message=item))
                else:
                    records.append(PublishErrorRecord.model_validate(item))
            except ValidationError:
                records.append(PublishErrorRecord(message=str(item)))
        return records
