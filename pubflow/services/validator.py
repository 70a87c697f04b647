"""HTTP client for the conformance validator."""

from __future__ import annotations

from typing import Any, Protocol

import httpx
from pydantic import BaseModel, Field, ValidationError

from pubflow.core.logging import get_logger
from pubflow.pipeline.errors import ValidatorError

logger = get_logger(__name__)


class ValidationReport(BaseModel):
    """Validator answer: no errors means the document conforms."""

    errors: list[str] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class Validator(Protocol):
    async def validate(self, http_location: str) -> ValidationReport: ...


class ValidatorClient:
    """Asks the validation service to check the document served at a URL."""

    def __init__(self, http_client: httpx.AsyncClient, validator_url: str) -> None:
        self._client = http_client
        self._validator_url = validator_url

    async def validate(self, http_location: str) -> ValidationReport:
        try:
            response = await self._client.get(
                self._validator_url,
                params={"url": http_location},
            )
            response.raise_for_status()
            report = ValidationReport.model_validate(response.json())
        except httpx.HTTPError as exc:
            raise ValidatorError(f"Validator request failed: {exc}") from exc
        except (ValueError, ValidationError) as exc:
            raise ValidatorError(f"Validator returned an invalid report: {exc}") from exc

        logger.info(
            "Validation report received",
            http_location=http_location,
            errors=len(report.errors),
        )
        return report
