"""End-to-end tests for PublicationEngine with collaborator doubles."""

import pytest

from pubflow.core.constants import SYSTEM_ERROR_MESSAGE, JobStatus, RequestStatus
from pubflow.pipeline.engine import PublicationEngine
from pubflow.pipeline.errors import RetrievalError
from pubflow.services.third_party import Violation
from tests.fakes import (
    METADATA,
    THIS_VERSION,
    STEP_ORDER as ORDER,
    FakeRetriever,
    FakeThirdPartyChecker,
    FakeValidator,
    make_collaborators,
    make_state,
)


async def run_recording(engine, state):
    seen = []
    final = await engine.run(state, on_progress=seen.append)
    return final, seen


class TestSuccess:
    @pytest.mark.asyncio
    async def test_all_steps_ok(self, engine, collaborators):
        final, seen = await run_recording(engine, make_state())

        assert final.status == RequestStatus.SUCCESS
        assert {name: job.status for name, job in final.jobs.items()} == {
            name: JobStatus.OK for name in ORDER
        }
        assert THIS_VERSION in final.history[-1]
        assert collaborators.commands.installs == [
            ("/tmp/pubflow/req-1", "/TR/2024/REC-x-20240101/")
        ]
        assert collaborators.commands.shortlinks == [THIS_VERSION]
        assert collaborators.publisher.calls == [METADATA]

    @pytest.mark.asyncio
    async def test_two_notifications_per_step(self, engine):
        _, seen = await run_recording(engine, make_state())

        # pending + terminal for each step, then the completion notification
        assert len(seen) == 2 * len(ORDER) + 1
        for index, name in enumerate(ORDER):
            started, completed = seen[2 * index], seen[2 * index + 1]
            assert started.job(name).status == JobStatus.PENDING
            assert completed.job(name).status == JobStatus.OK
            assert list(completed.jobs) == ORDER[: index + 1]

    @pytest.mark.asyncio
    async def test_history_only_grows_and_status_moves_once(self, engine):
        state = make_state()
        _, seen = await run_recording(engine, state)

        lengths = [len(s.history) for s in [state, *seen]]
        assert lengths == sorted(lengths)
        statuses = [s.status for s in seen]
        assert statuses[:-1] == [RequestStatus.STARTED] * (len(seen) - 1)
        assert statuses[-1] == RequestStatus.SUCCESS


class TestEarlyHalt:
    @pytest.mark.asyncio
    async def test_validation_failure_stops_the_run(self, settings):
        collaborators = make_collaborators(validator=FakeValidator(errors=["bad"]))
        engine = PublicationEngine(collaborators, settings)
        # Start past retrieval so the validator's entry is the only one
        state = make_state()

        final = await engine.run(state.with_job_status("retrieve-resources", JobStatus.OK))

        assert final.status == RequestStatus.FAILURE
        assert final.job("validate-document").status == JobStatus.FAILURE
        assert final.job("validate-document").errors == ("bad",)
        assert collaborators.token_checker.calls == []
        assert collaborators.third_party_checker.calls == []
        assert collaborators.publisher.calls == []
        assert collaborators.commands.installs == []
        assert collaborators.commands.shortlinks == []

    @pytest.mark.asyncio
    async def test_validation_failure_from_fresh_state(self, settings):
        collaborators = make_collaborators(validator=FakeValidator(errors=["bad"]))
        final = await PublicationEngine(collaborators, settings).run(make_state())

        assert list(final.jobs) == ["retrieve-resources", "validate-document"]
        assert final.status == RequestStatus.FAILURE

    @pytest.mark.asyncio
    async def test_third_party_failure(self, settings):
        checker = FakeThirdPartyChecker(violations={Violation("img", "https://cdn.example/a.png")})
        collaborators = make_collaborators(third_party_checker=checker)

        final = await PublicationEngine(collaborators, settings).run(make_state())

        assert final.status == RequestStatus.FAILURE
        assert list(final.jobs)[-1] == "check-third-party-resources"
        assert collaborators.publisher.calls == []


class TestErrors:
    @pytest.mark.asyncio
    async def test_retriever_exception_is_normalised(self, settings):
        collaborators = make_collaborators(
            retriever=FakeRetriever(exc=RetrievalError("Could not fetch it"))
        )

        final = await PublicationEngine(collaborators, settings).run(make_state())

        assert final.status == RequestStatus.ERROR
        assert final.job("retrieve-resources").status == JobStatus.ERROR
        assert final.job("retrieve-resources").errors == ("Could not fetch it",)
        assert list(final.jobs) == ["retrieve-resources"]
        assert collaborators.validator.calls == []

    @pytest.mark.asyncio
    async def test_missing_metadata_on_resume_is_a_system_error(self, engine, collaborators):
        state = (
            make_state()
            .with_job_status("retrieve-resources", JobStatus.OK)
            .with_job_status("validate-document", JobStatus.OK)
        )

        final = await engine.run(state)

        assert final.status == RequestStatus.ERROR
        assert final.history[-1] == SYSTEM_ERROR_MESSAGE
        assert "check-authorization" not in final.jobs
        assert collaborators.token_checker.calls == []


class TestTermination:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status", [RequestStatus.SUCCESS, RequestStatus.FAILURE, RequestStatus.ERROR]
    )
    async def test_terminal_state_is_returned_untouched(self, engine, collaborators, status):
        state = make_state().with_status(status)

        final, seen = await run_recording(engine, state)

        assert final is state
        assert seen == []
        assert collaborators.retriever.calls == []

    @pytest.mark.asyncio
    async def test_resume_runs_only_the_tail(self, engine, collaborators):
        state = make_state().with_metadata(METADATA)
        for name in ORDER[:5]:
            state = state.with_job_status(name, JobStatus.OK)

        final = await engine.run(state)

        assert final.status == RequestStatus.SUCCESS
        assert collaborators.retriever.calls == []
        assert collaborators.publisher.calls == []
        assert len(collaborators.commands.installs) == 1

    @pytest.mark.asyncio
    async def test_async_progress_handler(self, engine):
        seen = []

        async def on_progress(state):
            seen.append(state.status)

        await engine.run(make_state(), on_progress=on_progress)

        assert seen[-1] == RequestStatus.SUCCESS
