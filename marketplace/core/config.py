"""
Application settings.
Loaded from environment variables and the optional .env file.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Database. DATABASE_URL wins; otherwise DB_* compose a PostgreSQL URL.
    DATABASE_URL: Optional[str] = None
    DB_HOST: Optional[str] = None
    DB_PORT: int = 5432
    DB_NAME: Optional[str] = None
    DB_USER: Optional[str] = None
    DB_PASS: Optional[str] = None

    # Redis (session store)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0

    # Chat
    CHAT_MESSAGE_MAX_LENGTH: int = 10_000
    # When set, /ws requires ?token= and the auth userId must match the session user
    WS_REQUIRE_SESSION: bool = False

    # Optional
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    PROJECT_NAME: str = "Marketplace Chat"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            return (
                f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASS}"
                f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            )
        return "sqlite:///./marketplace.db"

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
