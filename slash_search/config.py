from __future__ import annotations

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    headless: bool = True
    user_data_dir: str | None = None
    navigation_timeout_ms: int = 30000
    network_idle_timeout_ms: int = 5000
    hydrate_wait_ms: int = 1500
    max_shadow_depth: int = 32
    log_level: str = "INFO"

def get_settings() -> Settings:
    return Settings()


settings = get_settings()
