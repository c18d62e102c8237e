"""
Spoonplan - Configuration
Service settings + scheduling window for the slot ledger.
"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ==========================================
    # SERVICE SETTINGS
    # ==========================================
    env: str = "dev"  # dev | prod
    db_url: str = "sqlite+aiosqlite:///./spoonplan.db"
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"

    # ==========================================
    # SCHEDULING WINDOW
    # ==========================================
    day_start_hour: int = 6   # first slot, "06:00"
    day_end_hour: int = 23    # last slot, "23:00" (inclusive)
    storm_horizon_days: int = 7

    # ==========================================
    # ADVISORY PRODUCER (week/month plans)
    # ==========================================
    openai_api_key: Optional[str] = None
    advisory_model: str = "gpt-4o-mini-2024-07-18"

    class Config:
        env_file = ".env"


settings = Settings()


@lru_cache()
def get_slot_hours() -> tuple[str, ...]:
    """
    Ordered hour labels of the daily window.
    Cached: the window is fixed for the process lifetime.
    """
    return tuple(
        f"{hour:02d}:00"
        for hour in range(settings.day_start_hour, settings.day_end_hour + 1)
    )
