from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    stripe_webhook_secret: str
    webhook_tolerance_seconds: int = 300
    allowed_origins: str = "http://localhost:5173"  # Comma separated
    max_body_bytes: int = 1_048_576  # 1 MiB
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("stripe_webhook_secret")
    @classmethod
    def secret_not_blank(cls, value: str) -> str:
        # Blank secret is a startup error
        if not value.strip():
            raise ValueError("STRIPE_WEBHOOK_SECRET must not be empty")
        return value

    @field_validator("webhook_tolerance_seconds")
    @classmethod
    def tolerance_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("WEBHOOK_TOLERANCE_SECONDS must be positive")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]
