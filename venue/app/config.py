# venue/app/config.py

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[2]


class Settings(BaseSettings):
    # Remote database (Supabase / PostgREST)
    supabase_url: str = "http://localhost:54321"
    supabase_anon_key: str = ""
    supabase_service_key: str = ""
    http_timeout: float = 10.0

    # Optional shared cache / rate limit store
    redis_url: Optional[str] = None

    # Calendar
    calendar_cache_ttl_seconds: int = 300
    calendar_max_retries: int = 2
    calendar_backoff_base: float = 1.0
    calendar_backoff_cap: float = 5.0
    venue_timezone: str = "UTC"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def admin_key(self) -> str:
        """Key used for admin RPCs; the anon key when no service key is set."""
        return self.supabase_service_key or self.supabase_anon_key


settings = Settings()
