"""
Exception hierarchy for the publication workflow.

All workflow exceptions inherit from PipelineError so callers can
catch broadly or narrowly as needed.  Collaborator adapters raise the
specific subclasses; steps turn every exception into an ``error``
outcome before it reaches the engine.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all workflow errors."""

    def __init__(
        self,
        message: str,
        *,
        step_name: str | None = None,
        details: dict | None = None,
    ) -> None:
        self.step_name = step_name
        self.details = details or {}
        super().__init__(message)


class StateTransitionError(PipelineError):
    """An illegal change of the overall request status was attempted."""
    pass


class MissingMetadataError(PipelineError):
    """A step needs a metadata value that no earlier step produced."""

    def __init__(self, key: str, **kwargs) -> None:
        self.key = key
        super().__init__(f"Missing metadata value: {key}", **kwargs)


class RetrievalError(PipelineError):
    """The document could not be fetched or unpacked."""
    pass


class ValidatorError(PipelineError):
    """The conformance validator could not be reached or answered garbage."""
    pass


class TokenCheckError(PipelineError):
    """The authorization service could not be reached or answered garbage."""
    pass


class ThirdPartyCheckError(PipelineError):
    """The document could not be scanned for third party resources."""
    pass


class PublishError(PipelineError):
    """The publishing service returned an unexpected response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        **kwargs,
    ) -> None:
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(message, **kwargs)


class CommandError(PipelineError):
    """An external command exited with a non-zero status or failed to spawn."""

    def __init__(
        self,
        message: str,
        *,
        command: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
        **kwargs,
    ) -> None:
        self.command = command or []
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message, **kwargs)
