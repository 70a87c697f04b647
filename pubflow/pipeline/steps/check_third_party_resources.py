"""
CheckThirdPartyResourcesStep: rejects documents that load resources
from origins that are not allowed.
"""

from __future__ import annotations

from pubflow.core.constants import StepName
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.third_party import ThirdPartyCheckerProtocol


class CheckThirdPartyResourcesStep(PipelineStep):
    """Scan the staged document for non-authorized resources."""

    name = StepName.CHECK_THIRD_PARTY_RESOURCES
    description = "Check for third party resources"
    error_history = "An error occurred while running the third party resources checker."

    def __init__(self, checker: ThirdPartyCheckerProtocol, http_location: str) -> None:
        self.checker = checker
        self.http_location = http_location

    async def execute(self) -> StepOutcome:
        violations = await self.checker.check(self.http_location)

        if not violations:
            return StepOutcome.ok(
                history="The document passed the third party resources check.",
            )

        # Sets have no order; keep the reported errors stable
        errors = sorted(str(v) for v in violations)
        return StepOutcome.failure(
            errors,
            history="The document contains non-authorized resources.",
        )
