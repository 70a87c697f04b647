"""
RetrieveResourcesStep: fetches the submitted document into temp storage.
"""

from __future__ import annotations

from pubflow.core.constants import StepName
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.retriever import Retriever


class RetrieveResourcesStep(PipelineStep):
    """Download the document (or archive) at the source URL."""

    name = StepName.RETRIEVE_RESOURCES
    description = "Retrieve the document and its resources"
    error_history = "The document could not be retrieved."

    def __init__(self, retriever: Retriever, source_url: str, temp_location: str) -> None:
        self.retriever = retriever
        self.source_url = source_url
        self.temp_location = temp_location

    async def execute(self) -> StepOutcome:
        await self.retriever.fetch_and_install(self.source_url, self.temp_location)
        return StepOutcome.ok(history="The file has been retrieved.")
