"""Application configuration from environment variables."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    anthropic_api_key: str = ""
    cutplanner_env: str = "development"
    cutplanner_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Layout service
    model_layout: str = "claude-sonnet-4-5-20250929"
    layout_max_tokens: int = 4096
    verify_layout: bool = True

    # History persistence: <history_dir>/<history_key>.json
    history_dir: Path = Path("data")
    history_key: str = "layoutHistory"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
