"""Application configuration"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_V1_PREFIX: str = "/api"
    PROJECT_NAME: str = "Sales CRM API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Database
    # WHY: SQLite keeps local development dependency-free; production
    # deployments point this at PostgreSQL.
    DATABASE_URL: str = "sqlite+aiosqlite:///./crm.db"

    # Deals
    DEFAULT_DEAL_PROBABILITY: int = 50

    # CSV import
    # WHY: Malformed numbers in deal rows silently degrade to defaults unless
    # strict mode is on, in which case the row is rejected.
    CSV_IMPORT_STRICT_NUMBERS: bool = False
    CSV_IMPORT_MAX_BYTES: int = 5 * 1024 * 1024

    # Invoices
    INVOICE_DUE_DAYS: int = 30

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")


settings = Settings()
