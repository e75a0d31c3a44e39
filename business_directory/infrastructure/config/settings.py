"""
Settings Module - Centralized Configuration Management
=======================================================

ARCHITECTURAL DECISION:
- All configuration is loaded from environment variables (no hardcoded secrets)
- Settings are immutable dataclasses
- Single source of truth for all configurable values

EXTENSIBILITY:
- To add a storage backend: add its settings group and a value for STORE_BACKEND
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Load .env file if present (development convenience)
load_dotenv()

STORE_BACKENDS = ("memory", "mongo")
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


def _env_int(name: str, default: Optional[int] = None) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return None


@dataclass(frozen=True)
class ServerSettings:
    """HTTP listener settings."""

    host: str = field(default_factory=lambda: os.getenv("SERVER_HOST", "127.0.0.1"))
    port: Optional[int] = field(default_factory=lambda: _env_int("SERVER_PORT"))


@dataclass(frozen=True)
class MongoSettings:
    """MongoDB connection settings. Only required for the mongo backend."""

    host: str = field(default_factory=lambda: os.getenv("MONGO_HOST", "localhost"))
    port: Optional[int] = field(default_factory=lambda: _env_int("MONGO_PORT", 27017))
    user: str = field(default_factory=lambda: os.getenv("MONGO_USER", ""))
    password: str = field(default_factory=lambda: os.getenv("MONGO_PASSWORD", ""))
    database: str = field(default_factory=lambda: os.getenv("MONGO_DATABASE", ""))

    @property
    def url(self) -> str:
        credentials = f"{quote_plus(self.user)}:{quote_plus(self.password)}@"
        return f"mongodb://{credentials}{self.host}:{self.port}/?retryWrites=true&w=majority"


@dataclass(frozen=True)
class Settings:
    """
    Root settings container - Single source of truth for all configuration.

    Usage:
        from business_directory.infrastructure.config import get_settings
        settings = get_settings()
        print(settings.server.port)
    """

    server: ServerSettings = field(default_factory=ServerSettings)
    mongo: MongoSettings = field(default_factory=MongoSettings)

    store_backend: str = field(
        default_factory=lambda: os.getenv("STORE_BACKEND", "memory").strip().lower()
    )
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())

    def validate(self) -> list[str]:
        """
        Validate settings and return a list of errors.
        Returns empty list if all settings are valid.
        """
        issues = []

        if self.server.port is None:
            issues.append("ERROR: SERVER_PORT must be set to an integer.")

        if self.store_backend not in STORE_BACKENDS:
            issues.append(
                f"ERROR: STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, "
                f"got '{self.store_backend}'."
            )

        if self.log_level not in LOG_LEVELS:
            issues.append(
                f"ERROR: LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{self.log_level}'."
            )

        if self.store_backend == "mongo":
            required = {
                "MONGO_USER": self.mongo.user,
                "MONGO_PASSWORD": self.mongo.password,
                "MONGO_DATABASE": self.mongo.database,
            }
            for name, value in required.items():
                if not value:
                    issues.append(f"ERROR: {name} not set (required by the mongo backend).")
            if self.mongo.port is None:
                issues.append("ERROR: MONGO_PORT must be an integer.")

        return issues


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get singleton Settings instance.
    Cached to ensure consistent settings throughout application lifecycle.
    """
    return Settings()
