"""
Pydantic Settings: configuration loaded from environment variables.

A single Settings value is built once per process and handed to the
collaborator adapters at construction time.  It is frozen: nothing may
change it while a publication run is in progress.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── External commands ────────────────────
    # Templates receive positional arguments appended after shlex splitting.
    INSTALL_COMMAND: str = "tr-install"
    SHORTLINK_COMMAND: str = "update-tr-shortlink"

    # ── Publishing service ───────────────────
    PUBSYSTEM_URL: str = "https://pubsystem.example.org/api/publish"
    PUBSYSTEM_USERNAME: str = ""
    PUBSYSTEM_PASSWORD: str = ""

    # ── Validation / authorization services ─
    VALIDATOR_URL: str = "https://validator.example.org/api/validate"
    TOKEN_CHECKER_URL: str = "https://auth.example.org/api/token"

    # ── Third party resources ────────────────
    ALLOWED_THIRD_PARTY_ORIGINS: list[str] = Field(
        default_factory=lambda: ["https://www.w3.org", "http://www.w3.org"],
    )

    # ── Result location ──────────────────────
    # Stripped from the document's version URI to get the install path.
    PUBLIC_URL_PREFIX: str = "http://www.w3.org"

    # ── HTTP ─────────────────────────────────
    HTTP_TIMEOUT: float = 30.0

    # ── Application ──────────────────────────
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore", "frozen": True}


def load_settings(**overrides) -> Settings:
    """Build the process-wide Settings value; keyword overrides win over env."""
    return Settings(**overrides)
