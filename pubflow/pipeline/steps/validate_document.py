"""
ValidateDocumentStep: runs the conformance validator on the staged copy.

On success the validator's metadata (version URIs, document title, ...)
becomes the request metadata that the later steps read.
"""

from __future__ import annotations

from pubflow.core.constants import StepName
from pubflow.core.logging import get_logger
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.validator import Validator

logger = get_logger(__name__)


class ValidateDocumentStep(PipelineStep):
    """Check the document served at the HTTP location for conformance."""

    name = StepName.VALIDATE_DOCUMENT
    description = "Validate the document"
    error_history = "An error occurred while running the validator."

    def __init__(self, validator: Validator, http_location: str) -> None:
        self.validator = validator
        self.http_location = http_location

    async def execute(self) -> StepOutcome:
        report = await self.validator.validate(self.http_location)

        if report.errors:
            logger.info(
                "Document failed validation",
                http_location=self.http_location,
                errors=len(report.errors),
            )
            return StepOutcome.failure(
                report.errors,
                history="The document failed validation.",
            )

        return StepOutcome.ok(
            history="The document passed validation.",
            metadata=report.metadata,
        )
