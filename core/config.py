"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Upstream API
    API_URL: Optional[str] = None
    API_KEY: Optional[str] = None
    OFFICE_CODE: Optional[str] = None
    OFFICE_CODES: str = ""
    REQUEST_TIMEOUT: float = 30.0

    # Database
    DB_PROVIDER: str = "mysql"
    DATABASE_URL: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: Optional[int] = None
    DB_USER: str = "etl_user"
    DB_PASSWORD: str = "etl_password"
    DB_NAME: str = "etl_db"
    TABLE_PREFIX: str = "jasper_"

    # Date ranges for report endpoints
    DATE_RANGE_MODE: str = "static"
    DATE_FROM: Optional[str] = None
    DATE_TO: Optional[str] = None
    DATE_RANGE_YEAR: Optional[int] = None
    DATE_RANGE_DAYS: int = 30

    # Scheduler
    CRON_SCHEDULE: str = "0 0 1 * *"
    SCHEDULER_ENABLED: bool = False

    # Operations API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ETL Configuration
    ETL_BATCH_SIZE: int = 100
    MAX_RETRIES: int = 3
    MAX_PAGES: int = 1000
    HEALTH_CHECK_INTERVAL: int = 50

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def database_url(self) -> str:
        """SQLAlchemy async URL for the configured provider"""
        return self.database_url_for(self.DB_PROVIDER)

    def database_url_for(self, provider: str) -> str:
        """SQLAlchemy async URL for a provider; DATABASE_URL wins when set"""
        if self.DATABASE_URL:
            return self.DATABASE_URL

        provider = provider.lower()
        if provider in ("postgres", "postgresql"):
            driver, port = "postgresql+asyncpg", self.DB_PORT or 5432
        else:
            driver, port = "mysql+aiomysql", self.DB_PORT or 3306

        return (
            f"{driver}://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{port}/{self.DB_NAME}"
        )

    @property
    def office_codes(self) -> List[str]:
        """Office codes for multi-office runs, parsed from a comma separated value"""
        return [code.strip() for code in self.OFFICE_CODES.split(",") if code.strip()]


settings = Settings()
