"""
RequestState: immutable snapshot of a publication request.

Every transition returns a new RequestState; an existing instance is
never modified.  The engine threads the value through each step and
hands every intermediate snapshot to the progress handler.

    state = RequestState.create(source_url, token, temp, http, result)
    state = state.with_job_status("publish", JobStatus.PENDING)
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from pubflow.core.constants import JobStatus, RequestStatus
from pubflow.pipeline.errors import MissingMetadataError, StateTransitionError


def _freeze(mapping: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


# ═══════════════════════════════════════════════════════════
#  JobRecord
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class JobRecord:
    """Status of one step, plus the reasons it did not succeed."""

    status: JobStatus
    errors: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"status": str(self.status)}
        if self.errors is not None:
            data["errors"] = list(self.errors)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> JobRecord:
        errors = data.get("errors")
        return cls(
            status=JobStatus(data["status"]),
            errors=tuple(str(e) for e in errors) if errors is not None else None,
        )


# ═══════════════════════════════════════════════════════════
#  RequestState
# ═══════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RequestState:
    """
    Progress of a single publication request.

    The five location/identity fields are fixed at construction.
    ``status`` leaves ``started`` at most once.  ``jobs`` gains one entry
    per step that has begun, ``history`` only grows, and ``metadata`` is
    replaced wholesale by whichever step produced it last.
    """

    # ─── Identity (set at init) ────────────────────────
    source_url: str
    token: str
    temp_location: str
    http_location: str
    result_location: str

    # ─── Progress ──────────────────────────────────────
    status: RequestStatus = RequestStatus.STARTED
    jobs: Mapping[str, JobRecord] = field(default_factory=_freeze)
    history: tuple[str, ...] = ()
    metadata: Mapping[str, Any] | None = None

    def __post_init__(self) -> None:
        # Normalise caller-supplied containers to read-only ones
        if not isinstance(self.jobs, MappingProxyType):
            object.__setattr__(self, "jobs", _freeze(self.jobs))
        if not isinstance(self.history, tuple):
            object.__setattr__(self, "history", tuple(self.history))
        if self.metadata is not None and not isinstance(self.metadata, MappingProxyType):
            object.__setattr__(self, "metadata", _freeze(self.metadata))
        object.__setattr__(self, "status", RequestStatus(self.status))

    @classmethod
    def create(
        cls,
        source_url: str,
        token: str,
        temp_location: str,
        http_location: str,
        result_location: str,
    ) -> RequestState:
        """Fresh state for a new publication request."""
        return cls(
            source_url=source_url,
            token=token,
            temp_location=temp_location,
            http_location=http_location,
            result_location=result_location,
        )

    # ─── Queries ───────────────────────────────────────

    @property
    def has_finished(self) -> bool:
        """True once the request reached success, failure or error."""
        return self.status != RequestStatus.STARTED

    def has_step_run(self, step_name: str) -> bool:
        """True if ``step_name`` has been attempted (it has a jobs entry)."""
        return step_name in self.jobs

    def job(self, step_name: str) -> JobRecord | None:
        return self.jobs.get(step_name)

    def metadata_value(self, key: str) -> Any:
        """Look up a metadata value that a later step depends on."""
        if self.metadata is None or key not in self.metadata:
            raise MissingMetadataError(key)
        return self.metadata[key]

    # ─── Transitions ───────────────────────────────────

    def with_status(self, status: RequestStatus) -> RequestState:
        status = RequestStatus(status)
        if status == self.status:
            return self
        if self.has_finished:
            raise StateTransitionError(
                f"Request already finished with status '{self.status}', "
                f"cannot move to '{status}'"
            )
        if status == RequestStatus.STARTED:
            raise StateTransitionError("A request cannot go back to 'started'")
        return replace(self, status=status)

    def with_job_status(self, step_name: str, status: JobStatus) -> RequestState:
        previous = self.jobs.get(step_name)
        record = JobRecord(
            status=JobStatus(status),
            errors=previous.errors if previous else None,
        )
        return replace(self, jobs={**self.jobs, step_name: record})

    def with_job_errors(self, step_name: str, errors: Iterable[str]) -> RequestState:
        previous = self.jobs.get(step_name)
        record = JobRecord(
            status=previous.status if previous else JobStatus.PENDING,
            errors=tuple(errors),
        )
        return replace(self, jobs={**self.jobs, step_name: record})

    def add_to_history(self, message: str) -> RequestState:
        return replace(self, history=(*self.history, message))

    def with_metadata(self, metadata: Mapping[str, Any]) -> RequestState:
        return replace(self, metadata=metadata)

    # ─── Serialisation ─────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible snapshot, e.g. for progress reporting."""
        return {
            "source_url": self.source_url,
            "token": self.token,
            "temp_location": self.temp_location,
            "http_location": self.http_location,
            "result_location": self.result_location,
            "status": str(self.status),
            "jobs": {name: job.to_dict() for name, job in self.jobs.items()},
            "history": list(self.history),
            "metadata": dict(self.metadata) if self.metadata is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RequestState:
        """Rebuild a state produced by ``to_dict`` (or supplied by a caller)."""
        return cls(
            source_url=data["source_url"],
            token=data["token"],
            temp_location=data["temp_location"],
            http_location=data["http_location"],
            result_location=data["result_location"],
            status=RequestStatus(data.get("status", RequestStatus.STARTED)),
            jobs={
                name: JobRecord.from_dict(job)
                for name, job in (data.get("jobs") or {}).items()
            },
            history=tuple(data.get("history") or ()),
            metadata=data.get("metadata"),
        )
