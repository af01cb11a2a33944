from functools import lru_cache
import json
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"


class Settings(BaseSettings):
    # Resolve to backend/.env so `uvicorn --app-dir backend` works from any cwd.
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="TIMETABLER_",
    )

    project_name: str = "Timetabler API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    generation_strategy: Literal["greedy", "backtracking"] = "greedy"
    generation_exclusivity: Literal["slot", "day"] = "slot"
    generation_option_count: int = Field(default=2, ge=1, le=10)
    generation_max_search_steps: int = Field(default=20_000, ge=1, le=5_000_000)
    generation_max_workers: int = Field(default=1, ge=1, le=32)
    generation_spread_across_days: bool = True
    generation_enforce_faculty_load_limits: bool = False

    max_request_bytes: int = Field(default=2_000_000, ge=1)

    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:9002",
        "http://127.0.0.1:9002",
    ]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def split_cors_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                try:
                    parsed = json.loads(stripped)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except json.JSONDecodeError:
                    pass
            return [item.strip() for item in value.split(",") if item.strip()]
        return value

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unsupported log level: {value}")
        return level


@lru_cache
def get_settings() -> Settings:
    return Settings()
