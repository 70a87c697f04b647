"""
PipelineStep: abstract base class for all publication steps.

A step pairs a stable name with a zero-argument operation, ``run()``,
that calls one external collaborator and always settles to a
StepOutcome.  Subclasses only implement ``execute()``; any exception it
raises is logged and normalised into the ``error`` shape here, so no
collaborator exception ever reaches the runner.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pubflow.core.constants import JobStatus
from pubflow.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class StepOutcome:
    """Normalised result of a step: ok, failure (rejection) or error."""

    status: JobStatus
    errors: tuple[str, ...] | None = None
    history: str | None = None
    metadata: Mapping[str, Any] | None = None

    @classmethod
    def ok(
        cls,
        history: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> StepOutcome:
        return cls(status=JobStatus.OK, history=history, metadata=metadata)

    @classmethod
    def failure(cls, errors: Iterable[str], history: str | None = None) -> StepOutcome:
        return cls(status=JobStatus.FAILURE, errors=tuple(errors), history=history)

    @classmethod
    def error(cls, errors: Iterable[str], history: str | None = None) -> StepOutcome:
        return cls(status=JobStatus.ERROR, errors=tuple(errors), history=history)


class PipelineStep(ABC):
    """
    Base class for every publication step.

    Subclasses MUST implement:
        - name (str)         : the jobs key, e.g. "publish"
        - description (str)  : human-readable label for logs
        - execute()          : the collaborator call and its interpretation

    Subclasses MAY override:
        - error_history (str): history line recorded when execute() raises
        - error_message(exc) : history line built from the exception
    """

    name: str = "unnamed_step"
    description: str = "No description"
    error_history: str | None = None

    @abstractmethod
    async def execute(self) -> StepOutcome:
        """
        Call the collaborator and map its answer to ok or failure.

        Raise on anything unexpected; ``run()`` turns it into ``error``.
        """
        ...

    async def run(self) -> StepOutcome:
        """The step's operation.  Never raises ``Exception``."""
        try:
            return await self.execute()
        except Exception as exc:
            logger.exception(
                "Step raised, recording error outcome",
                step_name=self.name,
                error=str(exc),
            )
            return StepOutcome.error([str(exc)], self.error_message(exc))

    def error_message(self, exc: Exception) -> str | None:
        return self.error_history

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
