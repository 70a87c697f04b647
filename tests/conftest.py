"""Shared fixtures."""

from __future__ import annotations

import pytest

from pubflow.core.config import Settings
from pubflow.pipeline.engine import PublicationEngine
from pubflow.pipeline.state import RequestState
from pubflow.services import Collaborators
from tests.fakes import make_collaborators, make_state


@pytest.fixture
def settings() -> Settings:
    return Settings(
        INSTALL_COMMAND="tr-install",
        SHORTLINK_COMMAND="update-tr-shortlink",
        PUBLIC_URL_PREFIX="http://www.w3.org",
        _env_file=None,
    )


@pytest.fixture
def state() -> RequestState:
    return make_state()


@pytest.fixture
def collaborators() -> Collaborators:
    return make_collaborators()


@pytest.fixture
def engine(collaborators, settings) -> PublicationEngine:
    return PublicationEngine(collaborators, settings)
