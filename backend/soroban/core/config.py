from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SOROBAN_",
        extra="ignore",
    )

    # Application
    app_name: str = "Soroban Trainer"
    debug: bool = False
    log_level: str = "INFO"

    # Generation: search attempts before the fallback, by action width
    default_max_attempts: int = 100
    multi_digit_max_attempts: int = 200

    # Worksheets
    worksheet_max_examples: int = 200
    worksheet_max_workers: int = 4

    # CORS
    frontend_url: str = "http://localhost:5173"


@lru_cache
def get_settings() -> Settings:
    return Settings()
