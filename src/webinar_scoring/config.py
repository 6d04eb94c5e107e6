"""Application settings using Pydantic Settings"""
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    SCHEDULER_ENABLED: bool = True
    RECALC_SWEEP_MINUTES: int = 15
    RECALC_SWEEP_LOOKBACK_MINUTES: int = 60

    LEADERBOARD_DEFAULT_LIMIT: int = 50
    LEADERBOARD_MAX_LIMIT: int = 500
    EXPORT_MAX_ROWS: int = 10000

    PROGRESS_MAX_RETRIES: int = 3

    @field_validator("APP_ENV")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        allowed = ["dev", "staging", "prod"]
        if v not in allowed:
            raise ValueError(f"APP_ENV must be one of: {allowed}")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if level not in allowed:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed}")
        return level

    @field_validator("PROGRESS_MAX_RETRIES", "RECALC_SWEEP_MINUTES", "EXPORT_MAX_ROWS")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_production(self) -> bool:
        return self.APP_ENV == "prod"

    @property
    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()


def get_settings() -> Settings:
    return settings
