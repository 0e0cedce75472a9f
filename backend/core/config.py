from dataclasses import dataclass
from functools import lru_cache

from pydantic_settings import BaseSettings


@dataclass(frozen=True, slots=True)
class UpstreamConfig:
    """Everything the resilience layer needs to talk to the employee API."""
    base_url: str = "http://localhost:8112/api/v1/employee"
    max_attempts: int = 6
    initial_delay_ms: int = 4000
    multiplier: float = 2.0
    timeout_seconds: float = 10.0
    rate_limit_statuses: frozenset[int] = frozenset({429})


class Settings(BaseSettings):
    # Upstream employee API
    EMPLOYEE_API_URL: str = "http://localhost:8112/api/v1/employee"
    UPSTREAM_TIMEOUT_SECONDS: float = 10.0

    # Retry policy
    RETRY_MAX_ATTEMPTS: int = 6
    RETRY_INITIAL_DELAY_MS: int = 4000
    RETRY_MULTIPLIER: float = 2.0

    # Backend
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8000
    APP_DEBUG: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False  # True for production (structured JSON), False for dev (colored)

    def upstream_config(self) -> UpstreamConfig:
        return UpstreamConfig(
            base_url=self.EMPLOYEE_API_URL.rstrip("/"),
            max_attempts=self.RETRY_MAX_ATTEMPTS,
            initial_delay_ms=self.RETRY_INITIAL_DELAY_MS,
            multiplier=self.RETRY_MULTIPLIER,
            timeout_seconds=self.UPSTREAM_TIMEOUT_SECONDS,
        )

    class Config:
        env_file = ".env"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
