from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables (or a .env file).

    MONGODB_URI selects the store: mongodb:// and mongodb+srv:// URLs use
    MongoDB, any other URL is handed to SQLAlchemy's async engine
    (e.g. sqlite+aiosqlite:///./catalog.db).
    """
    APP_NAME: str = "Product Database API"
    VERSION: str = "1.0.0"

    MONGODB_URI: str = "mongodb://localhost:27017/product-db"
    DATABASE_NAME: str = "product-db"

    HOST: str = "0.0.0.0"
    PORT: int = 5000

    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
