from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    APP_ENV: str = "development"
    CORS_ORIGINS: str = "http://localhost:3000"

    # Remote catalog service
    CATALOG_API_URL: str = "http://localhost:5000/api"
    CATALOG_API_TOKEN: str = ""
    CATALOG_API_TIMEOUT_SECONDS: float = 15.0

    # Import limits
    IMPORT_MAX_ROWS: int = 5000
    IMPORT_PREVIEW_LIMIT: int = 10
    IMPORT_RATE_LIMIT: str = "20/minute"
    RATE_LIMIT_ENABLED: bool = True

    # Catalog defaults applied to blank or unparseable cells
    DEFAULT_UNIT: str = "ADET"
    DEFAULT_TAX_RATE: float = 18.0
    DEFAULT_MIN_STOCK: int = 5

    # Monitoring
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.0

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",")]


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
