"""Canonical redirect service configuration."""

from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from canonical_redirect.models.canonical import CanonicalizationOptions


class Settings(BaseSettings):
    """Canonical redirect service settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    # Canonical URL rules
    append_trailing_slash: bool = False
    lowercase_urls: bool = True

    # CORS
    cors_origins: list[str] = []

    # Environment
    environment: str = "development"

    # Logging
    log_level: str = "INFO"
    log_format: Literal["auto", "json", "console"] = "auto"  # auto: json outside development
    log_component: str = "server"

    # OpenTelemetry
    otel_tracing_enabled: bool = False
    otel_service_name: str = "canonical-redirect"
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Convert log level to uppercase."""
        return v.upper()

    @property
    def json_logs(self) -> bool:
        """Whether log lines are rendered as JSON."""
        if self.log_format == "auto":
            return self.environment != "development"
        return self.log_format == "json"

    def canonicalization_options(self) -> CanonicalizationOptions:
        """Build the canonical URL rules from these settings."""
        return CanonicalizationOptions(
            append_trailing_slash=self.append_trailing_slash,
            lowercase_urls=self.lowercase_urls,
        )


settings = Settings()
