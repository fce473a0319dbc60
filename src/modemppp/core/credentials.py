"""Carrier credential lookup.

Passwords are loaded from ``config/credentials.yml`` when present and can be
overridden via environment variables. Environment variables take priority,
and missing credentials trigger a fail-fast error for the affected interface.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

logger = logging.getLogger(__name__)

ENV_PREFIX = "MODEMPPP_SECRET_"
DEFAULT_CREDENTIALS_PATH = Path("config/credentials.yml")


class CredentialsConfigError(ValueError):
    """Raised when the credentials file is missing required structure."""


class CredentialNotFoundError(KeyError):
    """Raised when a password cannot be resolved for ``secret_ref``."""


@dataclass(slots=True)
class Credentials:
    """Container for carrier passwords keyed by secret reference."""

    entries: Mapping[str, str]
    source_path: Path | None = None
    missing_source: bool = False

    def get(self, secret_ref: str) -> str | None:
        return self.entries.get(secret_ref)


def _normalize_secret_ref(secret_ref: str) -> str:
    """Convert secret references to ``UPPER_SNAKE_CASE`` for env lookup."""

    normalized = re.sub(r"[^A-Z0-9]+", "_", secret_ref.upper())
    return normalized.strip("_")


def _load_file_credentials(path: Path) -> Credentials:
    try:
        with path.open("r", encoding="utf-8") as handle:
            raw_data = yaml.safe_load(handle) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise CredentialsConfigError(f"Unable to read credentials file: {path}") from exc

    if not isinstance(raw_data, Mapping):
        raise CredentialsConfigError("Top-level credentials.yml structure must be a mapping.")

    raw_entries = raw_data.get("credentials")
    if raw_entries is None:
        raise CredentialsConfigError("Field 'credentials' is required in credentials.yml.")
    if not isinstance(raw_entries, Mapping):
        raise CredentialsConfigError("Field 'credentials' must be a mapping of secret refs.")

    entries: dict[str, str] = {}
    for ref, entry in raw_entries.items():
        if not isinstance(entry, Mapping):
            raise CredentialsConfigError(f"Credential '{ref}' must be a mapping.")
        password = entry.get("password")
        if password is None:
            raise CredentialsConfigError(f"Credential '{ref}' is missing required field 'password'.")
        if not isinstance(password, str):
            raise CredentialsConfigError(f"Credential '{ref}' field 'password' must be a string.")
        entries[str(ref)] = password

    return Credentials(entries=entries, source_path=path)


def load_credentials(
    path: Path = DEFAULT_CREDENTIALS_PATH, logger: logging.Logger | None = None
) -> Credentials:
    """Load credentials from the provided path."""

    logger = logger or logging.getLogger(__name__)
    if not path.exists():
        logger.warning("Credentials file not found at %s", path)
        return Credentials(entries={}, source_path=path, missing_source=True)

    credentials = _load_file_credentials(path)
    logger.debug("Credentials file loaded path=%s entries=%d", path, len(credentials.entries))
    return credentials


def resolve_password(secret_ref: str, credentials: Credentials | None = None) -> str:
    """Resolve the password for ``secret_ref``.

    Resolution order:
    1. Environment variable ``MODEMPPP_SECRET_<SECRET_REF>``
    2. ``config/credentials.yml`` (if present)
    """

    env_value = os.getenv(f"{ENV_PREFIX}{_normalize_secret_ref(secret_ref)}")
    if env_value is not None:
        return env_value

    if credentials is not None:
        password = credentials.get(secret_ref)
        if password is not None:
            return password

    raise CredentialNotFoundError(f"Secret '{secret_ref}' not found.")
