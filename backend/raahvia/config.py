from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ------------------------------------------------------------
    # Server
    # ------------------------------------------------------------
    backend_host: str = "0.0.0.0"
    backend_port: int = 5000
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"

    # ------------------------------------------------------------
    # Service identity (banner + /health)
    # ------------------------------------------------------------
    service_name: str = "RaahVia Backend API"
    service_version: str = "1.1.0"

    # ------------------------------------------------------------
    # CORS
    # ------------------------------------------------------------
    # Mobile clients on a dev LAN have no fixed origin, so "*" by default.
    # Comma-separated list in production, e.g. "https://app.example.com"
    cors_origins: str = "*"

    # ------------------------------------------------------------
    # Retrieval client
    # ------------------------------------------------------------
    # IMPORTANT: on a phone, point this at the machine running the gateway,
    # e.g. http://192.168.1.100:5000/api
    backend_base_url: str = "http://127.0.0.1:5000/api"
    scan_timeout_ms: int = 10_000
    scan_max_retries: int = 1
    scan_retry_delay_ms: int = 1_000
    scan_min_attempt_ms: int = 250
    device_id: str = "raahvia-mobile"
    client_platform: str = "python"
    app_version: str = "1.0.0"

    @property
    def cors_origins_list(self) -> List[str]:
        return [x.strip() for x in self.cors_origins.split(",") if x.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    def validate_runtime(self) -> None:
        """Fail fast on inconsistent config."""
        problems = []
        if self.scan_timeout_ms <= 0:
            problems.append("SCAN_TIMEOUT_MS must be > 0")
        if self.scan_max_retries < 0:
            problems.append("SCAN_MAX_RETRIES must be >= 0")
        if self.scan_min_attempt_ms < 0:
            problems.append("SCAN_MIN_ATTEMPT_MS must be >= 0")
        if self.scan_retry_delay_ms < 0:
            problems.append("SCAN_RETRY_DELAY_MS must be >= 0")
        if self.is_production and "*" in self.cors_origins_list:
            problems.append("CORS_ORIGINS must list explicit origins in production")
        if problems:
            raise RuntimeError(f"Invalid configuration: {'; '.join(problems)}")


class ClientConfig(BaseModel):
    """Immutable settings handed to a RetrievalClient / StatusProber.

    Built once from Settings (or directly in tests) and never mutated.
    """

    model_config = ConfigDict(frozen=True)

    base_url: str = "http://127.0.0.1:5000/api"
    timeout_ms: int = Field(10_000, gt=0)
    max_retries: int = Field(1, ge=0)
    retry_delay_ms: int = Field(1_000, ge=0)
    # a retry needs at least this much deadline left after its delay
    min_attempt_ms: int = Field(250, ge=0)
    device_id: str = "raahvia-mobile"
    platform: str = "python"
    app_version: str = "1.0.0"

    @classmethod
    def from_settings(cls, s: Settings) -> "ClientConfig":
        return cls(
            base_url=s.backend_base_url,
            timeout_ms=s.scan_timeout_ms,
            max_retries=s.scan_max_retries,
            retry_delay_ms=s.scan_retry_delay_ms,
            min_attempt_ms=s.scan_min_attempt_ms,
            device_id=s.device_id,
            platform=s.client_platform,
            app_version=s.app_version,
        )

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000.0

    @property
    def retry_delay_s(self) -> float:
        return self.retry_delay_ms / 1000.0

    @property
    def min_attempt_s(self) -> float:
        return self.min_attempt_ms / 1000.0

    @property
    def scan_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/qr-scan"

    @property
    def health_url(self) -> str:
        root = self.base_url.rstrip("/")
        if root.endswith("/api"):
            root = root[: -len("/api")]
        return f"{root}/health"


settings = Settings()
