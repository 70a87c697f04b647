"""
StepRunner: executes one PipelineStep against a RequestState.

Each run produces two notifications, in order:

    1. started   : the state with ``jobs[name] = pending``
    2. completed : the state with the step's outcome merged in

Both are returned as awaitables.  The collaborator is only called when
``completed`` is awaited, so the driver always observes ``started``
first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable

from pubflow.core.constants import SYSTEM_ERROR_MESSAGE, JobStatus, RequestStatus
from pubflow.core.logging import get_logger
from pubflow.pipeline.state import RequestState
from pubflow.pipeline.step import PipelineStep, StepOutcome

logger = get_logger(__name__)


@dataclass(frozen=True)
class StepNotifications:
    """The StepStarted / StepCompleted pair for a single step."""

    started: Awaitable[RequestState]
    completed: Awaitable[RequestState]

    def __iter__(self):
        yield self.started
        yield self.completed


def merge_outcome(state: RequestState, step_name: str, outcome: StepOutcome) -> RequestState:
    """Fold a step's outcome into the state that has it pending."""
    state = state.with_job_status(step_name, outcome.status)

    if outcome.status == JobStatus.FAILURE:
        state = state.with_status(RequestStatus.FAILURE)
    elif outcome.status == JobStatus.ERROR:
        state = state.with_status(RequestStatus.ERROR)

    if outcome.errors is not None:
        state = state.with_job_errors(step_name, outcome.errors)
    if outcome.history is not None:
        state = state.add_to_history(outcome.history)
    if outcome.metadata is not None:
        state = state.with_metadata(outcome.metadata)

    return state


def system_error(state: RequestState, step_name: str | None = None) -> RequestState:
    """State recording a defect in the workflow itself, not in a collaborator."""
    if step_name is not None:
        state = state.with_job_status(step_name, JobStatus.ERROR)
    if not state.has_finished:
        state = state.with_status(RequestStatus.ERROR)
    return state.add_to_history(SYSTEM_ERROR_MESSAGE)


class StepRunner:
    """Runs steps and reports their progress as two ordered notifications."""

    def run(self, state: RequestState, step: PipelineStep) -> StepNotifications:
        pending = state.with_job_status(str(step.name), JobStatus.PENDING)
        return StepNotifications(
            started=self._resolved(pending),
            completed=self._complete(pending, step),
        )

    @staticmethod
    async def _resolved(state: RequestState) -> RequestState:
        return state

    async def _complete(self, pending: RequestState, step: PipelineStep) -> RequestState:
        log = logger.bind(step_name=str(step.name), step_description=step.description)
        log.info("Step started")

        try:
            outcome = await step.run()
            state = merge_outcome(pending, str(step.name), outcome)
        except Exception as exc:
            log.exception("System error while running step", error=str(exc))
            return system_error(pending, str(step.name))

        if outcome.status == JobStatus.OK:
            log.info("Step completed", status=str(outcome.status))
        else:
            log.warning(
                "Step did not succeed, request stopping",
                status=str(outcome.status),
                errors=list(outcome.errors or ()),
            )
        return state
