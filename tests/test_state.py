"""Tests for the immutable RequestState."""

import pytest

from pubflow.core.constants import JobStatus, RequestStatus
from pubflow.pipeline.errors import MissingMetadataError, StateTransitionError
from pubflow.pipeline.state import JobRecord, RequestState
from tests.fakes import make_state


class TestCreate:
    def test_fresh_state_is_started_and_empty(self):
        state = make_state()
        assert state.status == RequestStatus.STARTED
        assert dict(state.jobs) == {}
        assert state.history == ()
        assert state.metadata is None
        assert not state.has_finished

    def test_direct_construction_defaults_to_empty_jobs(self):
        state = RequestState(
            source_url="https://example.org/doc",
            token="tok",
            temp_location="/tmp/req",
            http_location="https://staging.example/doc",
            result_location="https://results.example/req",
        )

        assert dict(state.jobs) == {}
        assert state.status == RequestStatus.STARTED

    def test_containers_are_read_only(self):
        state = make_state().with_job_status("publish", JobStatus.PENDING)
        with pytest.raises(TypeError):
            state.jobs["other"] = JobRecord(JobStatus.OK)


class TestTransitions:
    def test_transitions_return_new_instances(self):
        state = make_state()
        pending = state.with_job_status("publish", JobStatus.PENDING)

        assert pending is not state
        assert not state.has_step_run("publish")
        assert pending.job("publish") == JobRecord(JobStatus.PENDING)

    def test_job_status_keeps_errors(self):
        state = (
            make_state()
            .with_job_status("publish", JobStatus.PENDING)
            .with_job_errors("publish", ["boom"])
            .with_job_status("publish", JobStatus.ERROR)
        )
        assert state.job("publish") == JobRecord(JobStatus.ERROR, ("boom",))

    def test_history_only_grows(self):
        state = make_state().add_to_history("one").add_to_history("two")
        assert state.history == ("one", "two")

    def test_metadata_is_replaced_wholesale(self):
        state = make_state().with_metadata({"a": 1, "b": 2}).with_metadata({"c": 3})
        assert dict(state.metadata) == {"c": 3}

    def test_status_moves_once(self):
        state = make_state().with_status(RequestStatus.FAILURE)
        assert state.has_finished
        with pytest.raises(StateTransitionError):
            state.with_status(RequestStatus.SUCCESS)

    def test_status_cannot_return_to_started(self):
        with pytest.raises(StateTransitionError):
            make_state().with_status(RequestStatus.ERROR).with_status(RequestStatus.STARTED)

    def test_setting_same_status_is_a_no_op(self):
        state = make_state().with_status(RequestStatus.ERROR)
        assert state.with_status(RequestStatus.ERROR) is state


class TestQueries:
    def test_metadata_value(self):
        state = make_state().with_metadata({"this_version": "v"})
        assert state.metadata_value("this_version") == "v"

    def test_missing_metadata_raises(self):
        with pytest.raises(MissingMetadataError) as exc_info:
            make_state().metadata_value("latest_version")
        assert exc_info.value.key == "latest_version"


class TestSerialisation:
    def test_dict_round_trip_preserves_progress(self):
        state = (
            make_state()
            .with_job_status("retrieve-resources", JobStatus.OK)
            .with_job_status("validate-document", JobStatus.FAILURE)
            .with_job_errors("validate-document", ["bad title"])
            .with_status(RequestStatus.FAILURE)
            .add_to_history("The file has been retrieved.")
            .with_metadata({"title": "X"})
        )
        data = state.to_dict()

        assert data["jobs"]["validate-document"] == {
            "status": "failure",
            "errors": ["bad title"],
        }
        assert data["status"] == "failure"
        assert RequestState.from_dict(data) == state
