"""
Centralised library settings loaded from environment / .env file.
"""
from __future__ import annotations

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
_ENV_PATH = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseSettings):
    # ── Datastore ────────────────────────────────────────
    influx_host: str = "localhost"
    influx_port: int = 8086
    influx_database: str = "metrics"
    http_timeout: float = 5.0

    # ── Client ───────────────────────────────────────────
    client_provider: str = "mock"  # mock | http
    time_precision: str = "s"  # s | ms

    # ── Library ──────────────────────────────────────────
    log_level: str = "INFO"

    @property
    def base_url(self) -> str:
        return f"http://{self.influx_host}:{self.influx_port}"

    class Config:
        env_prefix = "TSQUERY_"
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
