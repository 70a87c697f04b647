"""
CheckAuthorizationStep: verifies that the caller's token allows
publishing this document from this source URL.
"""

from __future__ import annotations

from pubflow.core.constants import StepName
from pubflow.core.logging import get_logger
from pubflow.pipeline.step import PipelineStep, StepOutcome
from pubflow.services.token_checker import TokenCheckerProtocol, source_matches

logger = get_logger(__name__)


class CheckAuthorizationStep(PipelineStep):
    """
    Ask the token checker whether ``token`` may publish ``latest_version``.

    The request is authorized only when the checker says so AND the
    requested source URL lives under the source the checker reports,
    with http and https treated alike.
    """

    name = StepName.CHECK_AUTHORIZATION
    description = "Check publication rights"
    error_history = "An error occurred while running the token checker."

    def __init__(
        self,
        checker: TokenCheckerProtocol,
        latest_version: str,
        source_url: str,
        token: str,
    ) -> None:
        self.checker = checker
        self.latest_version = latest_version
        self.source_url = source_url
        self.token = token

    async def execute(self) -> StepOutcome:
        report = await self.checker.check(self.latest_version, self.token)
        matches = source_matches(report.source, self.source_url)

        if report.authorized and matches:
            return StepOutcome.ok(history="You are authorized to publish.")

        logger.warning(
            "Publication not authorized",
            latest_version=self.latest_version,
            authorized=report.authorized,
            source_matches=matches,
        )
        return StepOutcome.failure(
            ["Not authorized"],
            history="You are not authorized to publish.",
        )
