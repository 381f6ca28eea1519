from functools import lru_cache
from typing import Literal, Optional
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "FoodMap"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"

    # Mongo: either a full URI or the DB_* parts
    MONGO_URI: Optional[str] = None
    MONGO_DB: str = "foodmap"
    MONGO_TLS: bool = False
    DB_HOST: Optional[str] = None
    DB_PORT: str = "27017"
    DB_USER: Optional[str] = None
    DB_PASSWORD: Optional[str] = None

    # Redis (optional, store read cache)
    REDIS_URL: Optional[str] = None
    store_cache_ttl: int = 5 * 60            # 5 minutes
    store_cache_prefix: str = "store"        # redis key namespace

    # Stores
    STORE_TIMEZONE: str = "Asia/Taipei"      # wall clock used for is_open

    # API
    api_prefix: str = "/api"
    ADMIN_API_KEY: Optional[str] = None      # unlocks ip_addr / user_agent on comments
    ALLOWED_ORIGINS: str = ""

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

    def database_uri(self) -> Optional[str]:
        """
        MONGO_URI wins when set, otherwise the URI is assembled from DB_*.
        Returns None when neither is configured.
        """
        if self.MONGO_URI:
            return self.MONGO_URI
        if not self.DB_HOST:
            return None
        return (
            f"mongodb://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.MONGO_DB}?authSource=admin"
        )

    def allowed_origins(self) -> list[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
