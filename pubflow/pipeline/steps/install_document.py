"""
InstallDocumentStep: copies the staged document to its permanent
location with the configured install command.
"""

from __future__ import annotations

import re

from pubflow.core.constants import StepName
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.commands import Commands


def final_path(this_version: str, public_prefix: str) -> str:
    """
    Strip the public URL prefix (either scheme) from a version URI.

        >>> final_path("https://www.w3.org/TR/2024/foo/", "http://www.w3.org")
        '/TR/2024/foo/'
    """
    host = re.sub(r"^https?:", "", public_prefix.rstrip("/"), count=1, flags=re.IGNORECASE)
    pattern = r"^https?:" + re.escape(host)
    return re.sub(pattern, "", this_version, count=1, flags=re.IGNORECASE)


class InstallDocumentStep(PipelineStep):
    """Install the staged document under the path of its version URI."""

    name = StepName.INSTALL_IN_RESULT_LOCATION
    description = "Install the document in the result location"
    error_history = "An error occurred while installing the document in the result location."

    def __init__(
        self,
        commands: Commands,
        temp_location: str,
        this_version: str,
        public_prefix: str,
    ) -> None:
        self.commands = commands
        self.temp_location = temp_location
        self.this_version = this_version
        self.public_prefix = public_prefix

    async def execute(self) -> StepOutcome:
        await self.commands.install_document(
            self.temp_location,
            final_path(self.this_version, self.public_prefix),
        )
        return StepOutcome.ok()
