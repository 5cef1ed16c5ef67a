from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    cors_origins: list[str] = ["*"]

    # Probes
    probe_timeout_seconds: float = 30.0  # per-probe, unless the probe overrides it
    probes_file: str = "probes.yaml"  # catalog; defaults are used when missing
    database_url: str = ""  # SQLite path for the readiness probe; empty = no db probe

    # Tag vocabulary for the two standard views
    live_tag: str = "live"
    ready_tag: str = "ready"

    # Logging
    log_level: str = "INFO"


settings = Settings()
