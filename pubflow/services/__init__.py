"""
Collaborator adapters: the external services and OS commands the
publication steps call.

Collaborators bundles one instance of each so the engine can be built
with real adapters (``from_settings``) or with test doubles.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from pubflow.core.config import Settings
from pubflow.services.commands import Commands, ShellCommands
from pubflow.services.publisher import JsonHttpService, Publisher, PublisherProtocol
from pubflow.services.retriever import DocumentRetriever, Retriever
from pubflow.services.third_party import ThirdPartyChecker, ThirdPartyCheckerProtocol
from pubflow.services.token_checker import TokenChecker, TokenCheckerProtocol
from pubflow.services.validator import Validator, ValidatorClient


@dataclass(frozen=True)
class Collaborators:
    retriever: Retriever
    validator: Validator
    token_checker: TokenCheckerProtocol
    third_party_checker: ThirdPartyCheckerProtocol
    publisher: PublisherProtocol
    commands: Commands

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> Collaborators:
        """Build the default HTTP / subprocess adapters from configuration."""
        client = http_client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT)
        return cls(
            retriever=DocumentRetriever(client),
            validator=ValidatorClient(client, settings.VALIDATOR_URL),
            token_checker=TokenChecker(client, settings.TOKEN_CHECKER_URL),
            third_party_checker=ThirdPartyChecker(
                client, settings.ALLOWED_THIRD_PARTY_ORIGINS
            ),
            publisher=Publisher(JsonHttpService(
                client,
                settings.PUBSYSTEM_URL,
                settings.PUBSYSTEM_USERNAME,
                settings.PUBSYSTEM_PASSWORD,
            )),
            commands=ShellCommands(settings.INSTALL_COMMAND, settings.SHORTLINK_COMMAND),
        )


__all__ = ["Collaborators"]
