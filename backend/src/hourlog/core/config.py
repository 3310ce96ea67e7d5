from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict


BACKEND_ROOT = Path(__file__).resolve().parents[3]
ENV_PATH = BACKEND_ROOT / ".env"
LOCAL_CONFIG_PATH = BACKEND_ROOT / "config.local.json"

# Load environment variables as early as possible so Settings picks them up.
if ENV_PATH.exists():
    load_dotenv(ENV_PATH)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOURLOG_",
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Hourlog API"
    app_version: str = "0.1.0"
    docs_url: str = "/docs"
    log_level: str = "INFO"

    backend: Literal["embedded", "remote"] = "embedded"

    # embedded backend
    data_dir: Path = BACKEND_ROOT / "data"
    snapshot_slot: str = "time_tracker_db"

    # remote backend; credentials are resolved by the selector, not here
    runtime_config_url: Optional[str] = None
    local_config_path: Path = LOCAL_CONFIG_PATH
    env_file_path: Path = ENV_PATH
    remote_timeout: float = 10.0


@dataclass(frozen=True)
class RemoteConfig:
    """Endpoint and access key of the hosted store, plus where they came from."""

    url: str
    key: str
    source: str = "unknown"


@lru_cache
def get_settings() -> Settings:
    return Settings()
