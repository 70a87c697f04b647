"""
PublicationEngine: drives a publication request to a terminal status.

Responsibilities:
    - Ask the dispatcher for the next step of a request
    - Run it through the StepRunner (pending, then terminal notification)
    - Loop with iterate() until the request leaves ``started``
    - Hand every intermediate state to the caller's progress handler

Usage::

    engine = PublicationEngine.from_settings(load_settings())
    state = RequestState.create(url, token, temp, http, result)
    final = await engine.run(state, on_progress=print)
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable

import httpx

from pubflow.core.config import Settings
from pubflow.core.logging import get_logger
from pubflow.pipeline.dispatcher import PipelineDispatcher, StepContext
from pubflow.pipeline.iteration import iterate
from pubflow.pipeline.runner import StepRunner, system_error
from pubflow.pipeline.state import RequestState
from pubflow.services import Collaborators

logger = get_logger(__name__)

ProgressHandler = Callable[[RequestState], Any]


async def _resolved(state: RequestState) -> RequestState:
    return state


class PublicationEngine:
    """
    Runs the publication steps for one request after the other.

    A step that fails or errors moves the request out of ``started``,
    which is also the termination predicate, so the engine stops at the
    first step that does not succeed.
    """

    def __init__(
        self,
        collaborators: Collaborators,
        settings: Settings,
        dispatcher: PipelineDispatcher | None = None,
        runner: StepRunner | None = None,
    ) -> None:
        self.collaborators = collaborators
        self.settings = settings
        self.dispatcher = dispatcher or PipelineDispatcher(
            StepContext(collaborators=collaborators, settings=settings)
        )
        self.runner = runner or StepRunner()
        self._http_client: httpx.AsyncClient | None = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> PublicationEngine:
        """Engine wired to the real HTTP and subprocess adapters."""
        owned = http_client is None
        client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
        engine = cls(Collaborators.from_settings(settings, client), settings)
        if owned:
            engine._http_client = client
        return engine

    async def aclose(self) -> None:
        """Close the HTTP client the engine created itself, if any."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @staticmethod
    def has_finished(state: RequestState) -> bool:
        return state.has_finished

    def next(self, state: RequestState) -> list[Awaitable[RequestState]]:
        """
        Awaitables for the next round of a request.

        Either the pending + terminal notifications of the next step, or a
        single notification with the completed (``success``) state when
        every step has run.
        """
        try:
            step = self.dispatcher.next_step(state)
            if step is None:
                return [_resolved(self.dispatcher.complete(state))]
        except Exception as exc:
            logger.exception("Could not dispatch next step", error=str(exc))
            return [_resolved(system_error(state))]

        return list(self.runner.run(state, step))

    async def run(
        self,
        state: RequestState,
        on_progress: ProgressHandler | None = None,
    ) -> RequestState:
        """
        Drive ``state`` until it is terminal.

        Args:
            state: Fresh or partially-complete request state.  A state that
                   is already terminal is returned unchanged.
            on_progress: Called with every intermediate state, in order.
                         May be a coroutine function.
        """
        log = logger.bind(source_url=state.source_url)
        log.info("Publication started", jobs=list(state.jobs))

        final = await iterate(
            self.next,
            self.has_finished,
            on_progress or (lambda _state: None),
            state,
        )

        log.info(
            "Publication finished",
            status=str(final.status),
            jobs={name: str(job.status) for name, job in final.jobs.items()},
        )
        return final
