from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./comments.db"
    REDIS_URL: str = "redis://localhost:6379/0"
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    CORS_ORIGINS: list[str] = ["*"]

    # Connection pool (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 90
    DB_POOL_RECYCLE: int = -1
    AUTO_CREATE_TABLES: bool = True

    # Cache
    CACHE_ENABLED: bool = True
    CACHE_TTL_DETAIL: int = 300

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
