# barbershop/config.py

from datetime import time
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from barbershop.slots import BusinessHours


class Settings(BaseSettings):
    database_url: str = "sqlite:///./barbershop.db"
    sql_echo: bool = False

    secret_key: str = "change-me-later"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    # Shop opening hours (local time, same every day)
    opening_hour: int = 9
    closing_hour: int = 19
    slot_minutes: int = 30
    # Used when an existing appointment's service can no longer be resolved
    default_service_minutes: int = 30

    log_level: str = "INFO"

    admin_email: Optional[str] = None
    admin_password: Optional[str] = None

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )

    def business_hours(self) -> BusinessHours:
        return BusinessHours(
            opening=time(self.opening_hour, 0),
            closing=time(self.closing_hour, 0),
            step_minutes=self.slot_minutes,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
