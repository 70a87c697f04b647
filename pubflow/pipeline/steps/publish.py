"""
PublishStep: hands the validated metadata to the publishing service.
"""

from __future__ import annotations

from typing import Any, Mapping

from pubflow.core.constants import StepName
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.publisher import PublisherProtocol

PUBLISH_FAILED = "The document could not be published: "


class PublishStep(PipelineStep):
    """Register the document with the publishing service."""

    name = StepName.PUBLISH
    description = "Publish the document"

    def __init__(self, publisher: PublisherProtocol, metadata: Mapping[str, Any]) -> None:
        self.publisher = publisher
        self.metadata = metadata

    async def execute(self) -> StepOutcome:
        errors = await self.publisher.publish(self.metadata)

        if not errors:
            return StepOutcome.ok()

        messages = [str(e) for e in errors]
        return StepOutcome.failure(
            messages,
            history=PUBLISH_FAILED + ", ".join(e.message for e in errors),
        )

    def error_message(self, exc: Exception) -> str:
        return PUBLISH_FAILED + str(exc)
