"""redir configuration."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = Path(__file__).resolve().parents[2] / ".env"
load_dotenv(ENV_FILE, override=False)


class RedirSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REDIR_", env_file=str(ENV_FILE), extra="ignore")

    max_hops: int = Field(default=10, ge=1)
    request_timeout_s: float = 10.0
    output: Literal["json", "table"] = "table"
    user_agent: str = "redir/0.1.0"
    verify_tls: bool = True
    # Set to False to ignore HTTP(S)_PROXY and friends.
    trust_env: bool = True
    color: bool = True
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 7010


@lru_cache(maxsize=1)
def get_settings() -> RedirSettings:
    return RedirSettings()
