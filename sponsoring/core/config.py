# sponsoring/core/config.py

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Values come from the process environment (Docker Compose passes the
    # root .env through), no env_file lookup here.
    model_config = SettingsConfigDict(extra="ignore")

    # The environment mode: 'local' or 'prod'
    ENV: str = "local"

    # --- Database URLs ---
    DATABASE_URL_PROD: str = ""
    DATABASE_URL_LOCAL: str = "sqlite:///./sponsoring.db"

    # Other secrets
    JWT_SECRET: str
    INTERNAL_API_KEY: str

    # --- Email (Resend) ---
    # Leaving the API key unset disables sponsor notifications entirely.
    RESEND_API_KEY: Optional[str] = None
    RESEND_FROM_DOMAIN: str = "example.com"
    EMAIL_FROM_NAME: str = "Sponsoring"

    # --- Sponsor portal ---
    PORTAL_BASE_URL: str = "http://localhost:3000"
    PORTAL_TOKEN_EXPIRY_DAYS: int = 90

    # --- Deliverables ---
    DELIVERABLE_DUE_SOON_DAYS: int = 7

    LOG_LEVEL: str = "INFO"
    # Comma-separated list of allowed browser origins
    CORS_ORIGINS: str = "http://localhost:3000"

    @property
    def DATABASE_URL(self) -> str:
        return (
            self.DATABASE_URL_LOCAL if self.ENV == "local" else self.DATABASE_URL_PROD
        )

    @property
    def EMAIL_ENABLED(self) -> bool:
        return bool(self.RESEND_API_KEY)


# Create a single instance of the settings
settings = Settings()
