"""
PipelineDispatcher: decides which step a request needs next.

The step table is an ordered registry of StepSpec entries.  The
dispatcher picks the first entry whose name has no ``jobs`` record yet,
so a state that already carries some finished jobs resumes at the first
step never attempted.  When every step has run, ``complete()`` marks
the request as published.

To add a step:
    1. Create the step class in steps/
    2. Add a StepSpec to STEP_REGISTRY at the right position
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from pubflow.core.config import Settings
from pubflow.core.constants import (
    METADATA_LATEST_VERSION,
    METADATA_THIS_VERSION,
    RequestStatus,
    StepName,
)
from pubflow.core.logging import get_logger
from pubflow.pipeline.state import RequestState
from pubflow.pipeline.step import PipelineStep
from pubflow.pipeline.steps import (
    CheckAuthorizationStep,
    CheckThirdPartyResourcesStep,
    InstallDocumentStep,
    PublishStep,
    RetrieveResourcesStep,
    UpdateShortlinkStep,
    ValidateDocumentStep,
)
from pubflow.services import Collaborators

logger = get_logger(__name__)


@dataclass(frozen=True)
class StepContext:
    """Read-only inputs a step builder may use besides the request state."""

    collaborators: Collaborators
    settings: Settings


StepBuilder = Callable[[StepContext, RequestState], PipelineStep]


@dataclass(frozen=True)
class StepSpec:
    name: str
    build: StepBuilder


# ═══════════════════════════════════════════════════════════
#  Step Registry
# ═══════════════════════════════════════════════════════════

def _retrieve_resources(ctx: StepContext, state: RequestState) -> PipelineStep:
    return RetrieveResourcesStep(
        ctx.collaborators.retriever, state.source_url, state.temp_location
    )


def _validate_document(ctx: StepContext, state: RequestState) -> PipelineStep:
    return ValidateDocumentStep(ctx.collaborators.validator, state.http_location)


def _check_authorization(ctx: StepContext, state: RequestState) -> PipelineStep:
    return CheckAuthorizationStep(
        ctx.collaborators.token_checker,
        state.metadata_value(METADATA_LATEST_VERSION),
        state.source_url,
        state.token,
    )


def _check_third_party_resources(ctx: StepContext, state: RequestState) -> PipelineStep:
    return CheckThirdPartyResourcesStep(
        ctx.collaborators.third_party_checker, state.http_location
    )


def _publish(ctx: StepContext, state: RequestState) -> PipelineStep:
    return PublishStep(ctx.collaborators.publisher, state.metadata or {})


def _install_document(ctx: StepContext, state: RequestState) -> PipelineStep:
    return InstallDocumentStep(
        ctx.collaborators.commands,
        state.temp_location,
        state.metadata_value(METADATA_THIS_VERSION),
        ctx.settings.PUBLIC_URL_PREFIX,
    )


def _update_shortlink(ctx: StepContext, state: RequestState) -> PipelineStep:
    return UpdateShortlinkStep(
        ctx.collaborators.commands,
        state.metadata_value(METADATA_THIS_VERSION),
    )


STEP_REGISTRY: tuple[StepSpec, ...] = (
    StepSpec(StepName.RETRIEVE_RESOURCES, _retrieve_resources),
    StepSpec(StepName.VALIDATE_DOCUMENT, _validate_document),
    StepSpec(StepName.CHECK_AUTHORIZATION, _check_authorization),
    StepSpec(StepName.CHECK_THIRD_PARTY_RESOURCES, _check_third_party_resources),
    StepSpec(StepName.PUBLISH, _publish),
    StepSpec(StepName.INSTALL_IN_RESULT_LOCATION, _install_document),
    StepSpec(StepName.UPDATE_SHORTLINK, _update_shortlink),
)


class PipelineDispatcher:
    """
    Selects and parameterises the next step for a request.

    Performs no I/O: building a step only reads the request state and the
    step context.  Raises MissingMetadataError when a step needs a value
    that no earlier step produced.
    """

    def __init__(
        self,
        context: StepContext,
        registry: Sequence[StepSpec] | None = None,
    ) -> None:
        self.context = context
        self.registry = tuple(registry if registry is not None else STEP_REGISTRY)

    def next_spec(self, state: RequestState) -> StepSpec | None:
        """First registered step not yet attempted, or None if all have run."""
        for spec in self.registry:
            if not state.has_step_run(spec.name):
                return spec
        return None

    def next_step(self, state: RequestState) -> PipelineStep | None:
        spec = self.next_spec(state)
        if spec is None:
            return None
        step = spec.build(self.context, state)
        logger.debug("Step selected", step_name=str(spec.name))
        return step

    def complete(self, state: RequestState) -> RequestState:
        """Mark a request whose every step has run as published."""
        this_version = state.metadata_value(METADATA_THIS_VERSION)
        return state.with_status(RequestStatus.SUCCESS).add_to_history(
            f'The document has been published at <a href="{this_version}">{this_version}</a>.'
        )

    def list_steps(self) -> list[str]:
        return [str(spec.name) for spec in self.registry]
