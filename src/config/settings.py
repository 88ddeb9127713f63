# src/config/settings.py - v1
"""Typed configuration loaded from .env via pydantic-settings.

Every field can be set through the environment with the PAGESYNC_ prefix
(e.g. PAGESYNC_API_BASE_URL, PAGESYNC_UPLOAD_TIMEOUT_S).
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagesync.assets import scanner


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


DEFAULT_IGNORE_PATTERNS = ",".join(scanner.DEFAULT_IGNORE_PATTERNS)


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_prefix="PAGESYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Remote artifact store ===
    api_base_url: str = "https://api.luckyjingwen.top"
    api_token: SecretStr | None = None

    # Per-call timeouts (seconds)
    request_timeout_s: float = 30.0
    check_missing_timeout_s: float = 30.0
    upload_timeout_s: float = 120.0
    deploy_timeout_s: float = 60.0

    # === Local scan / hashing ===
    max_file_size_mb: int = 25
    hash_workers: int = 8
    ignore_patterns: str = DEFAULT_IGNORE_PATTERNS

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 5

    # --- Validators ---

    @field_validator("api_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_base_url must be an http(s) URL")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if self.hash_workers < 1:
            errors.append("HASH_WORKERS must be >= 1")

        if self.max_file_size_mb <= 0:
            errors.append("MAX_FILE_SIZE_MB must be > 0")

        timeouts = (
            self.request_timeout_s,
            self.check_missing_timeout_s,
            self.upload_timeout_s,
            self.deploy_timeout_s,
        )
        if any(t <= 0 for t in timeouts):
            errors.append("All timeouts must be > 0")

        # Upload payloads are far larger than the key list sent to check-missing.
        if self.upload_timeout_s <= self.check_missing_timeout_s:
            errors.append("UPLOAD_TIMEOUT_S must be > CHECK_MISSING_TIMEOUT_S")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    @property
    def ignore_patterns_list(self) -> list[str]:
        """Parse comma-separated ignore patterns."""
        return [p.strip() for p in self.ignore_patterns.split(",") if p.strip()]


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
