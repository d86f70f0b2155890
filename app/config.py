from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite+aiosqlite:///./realty_pipeline.db"
    DB_OPERATION_TIMEOUT_SECONDS: float = 10.0  # Deadline for one lifecycle transaction

    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # SMTP (email channel is log-only when SMTP_HOST is unset)
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    EMAIL_FROM: str = "no-reply@realty-pipeline.local"
    EMAIL_FROM_NAME: str = "Realty Pipeline"

    # Base URL of the web client, used for links in emails
    CLIENT_URL: str = "http://localhost:3000"

    MANAGER_ROLE: str = "real_estate_manager"

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def email_enabled(self) -> bool:
        """Email is only sent when an SMTP host is configured"""
        return bool(self.SMTP_HOST)


settings = Settings()
