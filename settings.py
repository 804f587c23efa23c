from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # MongoDB
    DATABASE_URL: str = "mongodb://localhost:27017"
    DATABASE_NAME: str = "music_catalog"

    # Auth
    JWT_SECRET: str = "development-secret-change-me-in-production"
    JWT_EXPIRES_DAYS: int = 30
    BCRYPT_ROUNDS: int = 12

    # Runtime
    APP_ENV: str = "development"
    CORS_ORIGINS: Optional[str] = None
    LOG_CONFIG: str = "logger_config.yaml"
    PORT: int = 8000

    # Load from .env file if present
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse comma-separated CORS origins into a list, defaulting to any origin."""
        if not self.CORS_ORIGINS:
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
