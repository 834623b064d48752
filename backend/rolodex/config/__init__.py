"""Runtime configuration.

All settings come from environment variables, optionally seeded from a
``.env`` file at the repository root (``.env.test`` when ``NODE_ENV=test``).
Modules call :func:`get_settings` instead of reading ``os.environ``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# backend/rolodex/config/__init__.py -> repository root
_REPO_ROOT = Path(__file__).resolve().parents[3]

_TRUTHY = {"1", "true", "yes", "on"}


def _truthy(value: str | None) -> bool:  # noqa: D401 – small helper
    return value is not None and value.strip().lower() in _TRUTHY


@dataclass
class Settings:  # noqa: D401 – simple data container
    """Typed view of the environment."""

    testing: bool

    # Storage
    database_url: str

    # HTTP / logging
    log_level: str
    allowed_cors_origins: str

    # SMTP relay used for the admin alert
    smtp_host: str
    smtp_port: int
    smtp_use_ssl: bool
    smtp_username: str | None
    smtp_password: str | None
    smtp_timeout: float

    # Alert envelope
    mail_enabled: bool
    mail_from: str
    mail_from_name: str
    mail_to: str
    mail_to_name: str

    @property
    def resolved_database_url(self) -> str:
        """``DATABASE_URL`` if set, else a file DB (in-memory under TESTING)."""

        if self.database_url:
            return self.database_url
        return "sqlite:///:memory:" if self.testing else "sqlite:///./rolodex.db"

    def override(self, **kwargs: Any) -> None:
        """Patch individual values; unknown names raise ``AttributeError``."""
        for key, value in kwargs.items():
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no attribute '{key}'")
            setattr(self, key, value)


def _env_file() -> Path | None:
    candidates = [_REPO_ROOT / ".env"]
    if os.getenv("NODE_ENV", "development") == "test":
        candidates.insert(0, _REPO_ROOT / ".env.test")
    return next((path for path in candidates if path.exists()), None)


def _load_settings() -> Settings:  # noqa: D401 – helper
    env_file = _env_file()
    if env_file is not None:
        # The file wins over the shell, except for an explicit TESTING flag.
        explicit_testing = os.getenv("TESTING")
        load_dotenv(env_file, override=True)
        if explicit_testing:
            os.environ["TESTING"] = explicit_testing

    testing = _truthy(os.getenv("TESTING"))

    return Settings(
        testing=testing,
        database_url=os.getenv("DATABASE_URL", ""),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        allowed_cors_origins=os.getenv("ALLOWED_CORS_ORIGINS", ""),
        smtp_host=os.getenv("SMTP_HOST", "127.0.0.1"),
        smtp_port=int(os.getenv("SMTP_PORT", "25")),
        smtp_use_ssl=_truthy(os.getenv("SMTP_USE_SSL")),
        smtp_username=os.getenv("SMTP_USERNAME") or None,
        smtp_password=os.getenv("SMTP_PASSWORD") or None,
        smtp_timeout=float(os.getenv("SMTP_TIMEOUT", "10")),
        # Never send real mail from a test run.
        mail_enabled=not testing and _truthy(os.getenv("MAIL_ENABLED", "true")),
        mail_from=os.getenv("MAIL_FROM", "noreply@contactmanager.com"),
        mail_from_name=os.getenv("MAIL_FROM_NAME", "noreply"),
        mail_to=os.getenv("MAIL_TO", "Admin@contactmanager.com"),
        mail_to_name=os.getenv("MAIL_TO_NAME", "SysAdmin"),
    )


def _validate_required(settings: Settings) -> None:  # noqa: D401 – helper
    """Refuse to start with a configuration that cannot work."""

    problems = []
    if not 0 < settings.smtp_port < 65536:
        problems.append(f"SMTP_PORT out of range: {settings.smtp_port}")
    if settings.smtp_username and not settings.smtp_password:
        problems.append("SMTP_PASSWORD (required when SMTP_USERNAME is set)")
    if settings.mail_enabled and not settings.mail_to:
        problems.append("MAIL_TO (required when MAIL_ENABLED)")

    if problems:
        raise RuntimeError(f"CRITICAL: Invalid configuration: {', '.join(problems)}")


def get_settings() -> Settings:  # noqa: D401 – public accessor
    """Read the environment and return a fresh, validated :class:`Settings`."""

    settings = _load_settings()
    _validate_required(settings)
    return settings


__all__ = [
    "Settings",
    "get_settings",
]
