

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings model.

    All configuration variables are loaded from environment variables
    (or a .env file) with fallback defaults for development.
    """

    # Database
    database_url: str = "sqlite+aiosqlite:///./accounts.db"

    # Frontend
    frontend_url: Optional[str] = None
    frontend_base_domain: Optional[str] = None

    # Email settings
    email_from: Optional[str] = None
    email_brand_name: str = "Sure Proxies"
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    smtp_timeout: float = 30.0

    # Firebase settings
    firebase_project_id: Optional[str] = None
    firebase_credentials_path: Optional[str] = None
    firebase_api_key: Optional[str] = None
    identity_toolkit_url: str = "https://identitytoolkit.googleapis.com/v1"

    # Runtime
    node_env: str = "development"
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"
        # SMTP_PORT= in a .env file means "not configured"
        env_ignore_empty = True

    @property
    def is_production(self) -> bool:
        return self.node_env == "production"

    @property
    def smtp_configured(self) -> bool:
        """All four SMTP options are required before delivery is attempted."""
        return bool(self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_pass)

    @property
    def sender_address(self) -> str:
        return self.email_from or f"no-reply@{self.frontend_base_domain or 'localhost'}"

    @property
    def verification_redirect_url(self) -> str:
        if self.frontend_url:
            return f"{self.frontend_url}/signin"
        return "http://localhost:3000/signin"


# Global settings instance
settings = Settings()
