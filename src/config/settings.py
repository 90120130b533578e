# src/config/settings.py — v1
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for all deployment-specific settings: listen address,
LLM budget and prompt template, retry policy, cache and artifact backends,
logging.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PROMPT_TEMPLATE = (
    "You are a compliance reviewer. Compare the webpage content against the "
    "policy and list every statement on the webpage that deviates from the "
    "policy. Reply with one finding per line.\n\n"
    "WEBPAGE CONTENT:\n{target}\n\n"
    "POLICY CONTENT:\n{policy}\n"
)


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # === HTTP server ===
    host: str = "0.0.0.0"
    port: int = 8080

    # === LLM ===
    llm_provider: str = "openai"
    llm_model: str = "gpt-4"
    llm_max_tokens: int = 1024
    llm_temperature: float = 0.2
    openai_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("openai_api_key", "openapi_key"),
    )
    prompt_template: str = DEFAULT_PROMPT_TEMPLATE

    # === Retry ===
    retry_max_attempts: int = 3
    retry_base_delay_s: float = 0.0
    retry_backoff_factor: float = 2.0
    retry_jitter: bool = False
    analysis_timeout_s: float | None = None

    # === Findings ===
    finding_granularity: Literal["tokens", "lines"] = "tokens"

    # === Extraction / fetch ===
    extract_heading_tags: str = "h2,h3"
    fetch_timeout_s: float = 30.0
    fetch_max_bytes: int = 10 * 1024 * 1024

    # === Cache ===
    cache_backend: Literal["memory", "json", "redis"] = "memory"
    cache_root: Path = Path("~/.policylens/cache")
    cache_redis_url: str = ""

    # === Artifacts ===
    artifact_backend: Literal["local", "s3"] = "local"
    artifact_dir: str = "asset"
    artifact_s3_bucket: str = ""
    artifact_s3_prefix: str = "policylens/"
    artifact_s3_region: str = ""
    artifact_s3_endpoint_url: str = ""

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """At least the initial attempt must be allowed."""
        if v < 1:
            raise ValueError("retry_max_attempts must be >= 1")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if "{target}" not in self.prompt_template or "{policy}" not in self.prompt_template:
            errors.append("PROMPT_TEMPLATE must contain {target} and {policy}")
        else:
            try:
                self.prompt_template.format(target="", policy="")
            except (KeyError, IndexError, ValueError) as e:
                errors.append(
                    f"PROMPT_TEMPLATE is not a valid format string ({e!r}); "
                    "escape literal braces as {{ }}"
                )

        if self.cache_backend == "redis" and not self.cache_redis_url:
            errors.append("CACHE_REDIS_URL must be set when CACHE_BACKEND=redis")

        if self.artifact_backend == "s3" and not self.artifact_s3_bucket:
            errors.append("ARTIFACT_S3_BUCKET must be set when ARTIFACT_BACKEND=s3")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def heading_tags_list(self) -> list[str]:
        """Parse comma-separated heading tags."""
        return [t.strip().lower() for t in self.extract_heading_tags.split(",") if t.strip()]

    @property
    def listen_addr(self) -> str:
        return f"{self.host}:{self.port}"


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or CLI flags).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
