from __future__ import annotations

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Unset means ephemeral mode: no persistence, empty replays.
    DATABASE_URL: str | None = None

    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE: int = 300
    DB_CONNECT_RETRIES: int = 5
    DB_CONNECT_RETRY_DELAY: float = 3.0

    CORS_ORIGINS: list[str] = ["*"]

    WS_HEARTBEAT_SECONDS: int = 30

    HISTORY_LIMIT: int = Field(50, ge=1, le=50)
    HISTORY_TIMEOUT_SECONDS: float = 5.0
    PERSIST_TIMEOUT_SECONDS: float = 5.0
    MESSAGE_MIN_INTERVAL_MS: int = 300
    ECHO_TO_SENDER: bool = True

    HOST: str = "0.0.0.0"
    PORT: int = 3000
    LOG_LEVEL: str = "info"

    model_config = ConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
