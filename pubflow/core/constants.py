"""Shared constants and enums used across the publication workflow."""

from enum import StrEnum


class RequestStatus(StrEnum):
    """Overall status of a publication request."""

    STARTED = "started"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


class JobStatus(StrEnum):
    """Status of an individual step within a request."""

    PENDING = "pending"
    OK = "ok"
    FAILURE = "failure"
    ERROR = "error"


class StepName(StrEnum):
    """Stable step identifiers, used as keys of ``RequestState.jobs``."""

    RETRIEVE_RESOURCES = "retrieve-resources"
    VALIDATE_DOCUMENT = "validate-document"
    CHECK_AUTHORIZATION = "check-authorization"
    CHECK_THIRD_PARTY_RESOURCES = "check-third-party-resources"
    PUBLISH = "publish"
    INSTALL_IN_RESULT_LOCATION = "install-in-result-location"
    UPDATE_SHORTLINK = "update-shortlink"


# Metadata keys produced by the validator and read by later steps
METADATA_LATEST_VERSION = "latest_version"
METADATA_THIS_VERSION = "this_version"

SYSTEM_ERROR_MESSAGE = "A system error occurred during the process."
