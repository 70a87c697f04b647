"""Tests for building the engine from Settings with the real adapters."""

import httpx
import pytest

from pubflow.pipeline.engine import PublicationEngine
from pubflow.services.commands import ShellCommands
from pubflow.services.publisher import Publisher
from pubflow.services.retriever import DocumentRetriever


class TestFromSettings:
    @pytest.mark.asyncio
    async def test_real_adapters_are_wired(self, settings):
        engine = PublicationEngine.from_settings(settings)
        collaborators = engine.collaborators

        assert isinstance(collaborators.retriever, DocumentRetriever)
        assert isinstance(collaborators.publisher, Publisher)
        assert isinstance(collaborators.commands, ShellCommands)
        assert engine.dispatcher.context.settings is settings

        await engine.aclose()

    @pytest.mark.asyncio
    async def test_caller_client_is_not_closed(self, settings):
        client = httpx.AsyncClient()
        engine = PublicationEngine.from_settings(settings, http_client=client)

        await engine.aclose()

        assert not client.is_closed
        await client.aclose()
