"""UpdateShortlinkStep: points the document's shortlink at the new version."""

from __future__ import annotations

from pubflow.core.constants import StepName
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.commands import Commands


class UpdateShortlinkStep(PipelineStep):
    name = StepName.UPDATE_SHORTLINK
    description = "Update the shortlink"
    error_history = "An error occurred while updating the shortlink."

    def __init__(self, commands: Commands, this_version: str) -> None:
        self.commands = commands
        self.this_version = this_version

    async def execute(self) -> StepOutcome:
        await self.commands.update_shortlink(self.this_version)
        return StepOutcome.ok()
