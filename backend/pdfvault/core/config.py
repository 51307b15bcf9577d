"""Application configuration with validation."""

from enum import Enum
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Environment(str, Enum):
    """Application environment."""
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class ConfigurationError(Exception):
    """Raised when application configuration is invalid for the environment."""
    pass


_DEV_ACCESS_SECRET = "dev-insecure-key-change-me"
_DEV_REFRESH_SECRET = "dev-insecure-refresh-key-change-me"


class Settings(BaseSettings):
    """
    Application settings with validation.

    Covers the HTTP surface (CORS, cookies, tokens), the local database,
    and the remote storage provider the folder tree is mirrored into.
    """

    # Environment
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Application environment (development/production)"
    )

    # CORS Configuration
    cors_allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./pdfvault.db",
        description="Database connection URL"
    )
    skip_db_init: bool = Field(
        default=False,
        description="Skip create_all at startup (tables managed externally)"
    )

    # Authentication
    # Access and refresh tokens are signed with different keys so a leaked
    # access key cannot mint long-lived refresh tokens.
    jwt_secret_key: str = Field(
        default=_DEV_ACCESS_SECRET,
        description="Access token signing secret (override in production)"
    )
    jwt_refresh_secret_key: str = Field(
        default=_DEV_REFRESH_SECRET,
        description="Refresh token signing secret (override in production)"
    )
    jwt_algorithm: str = Field(default="HS256")
    access_token_minutes: int = Field(default=60, description="Access token lifetime")
    refresh_token_days: int = Field(default=7, description="Refresh token lifetime")
    secure_cookies: bool = Field(
        default=False,
        description="Set the Secure flag on auth cookies (enable behind HTTPS)"
    )

    # Remote storage provider
    remote_api_url: str = Field(
        default="http://localhost:9000",
        description="Base URL of the remote storage API"
    )
    remote_email: str = Field(default="", description="Remote storage account email")
    remote_password: str = Field(default="", description="Remote storage account password")
    remote_share_base_url: str = Field(
        default="https://mega.nz",
        description="Prefix of stored locators: {base}/fm/<node_id>"
    )
    remote_app_root: str = Field(
        default="pdf-vault",
        description="Name of the top-level container holding every owner namespace"
    )
    remote_connect_timeout: float = Field(default=5.0)
    remote_read_timeout: float = Field(default=120.0)

    # Retry policy for remote mutations (fixed delay when backoff == 1.0)
    remote_retry_attempts: int = Field(default=5, ge=1)
    remote_retry_delay_seconds: float = Field(default=5.0, ge=0)
    remote_retry_backoff: float = Field(default=1.0, ge=1.0)

    # Remote tree traversal limits
    locator_max_depth: int = Field(default=2048, ge=1)
    locator_max_nodes: int = Field(default=50000, ge=1)

    # Uploads
    max_upload_bytes: int = Field(
        default=50 * 1024 * 1024,
        description="Largest accepted PDF upload in bytes"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: 'json' for structured, 'text' for human-readable"
    )

    def get_cors_origins(self) -> List[str]:
        """
        Get CORS origins as a list.

        Parses comma-separated string and validates no wildcards.
        Cookies are sent cross-origin, so a wildcard is never acceptable.
        """
        origins = [origin.strip() for origin in self.cors_allowed_origins.split(',') if origin.strip()]

        if "*" in origins:
            raise ValueError(
                "Wildcard CORS (*) not allowed. "
                "Specify explicit origins in CORS_ALLOWED_ORIGINS"
            )

        return origins

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper

    @field_validator('remote_share_base_url', 'remote_api_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    def validate_production_config(self) -> List[str]:
        """Validate configuration for production environment.

        In production, fails startup if security-critical settings use insecure defaults.
        In development, returns the problems so startup can log them.

        Raises:
            ConfigurationError: If production config is insecure.
        """
        errors: list[str] = []

        if self.jwt_secret_key == _DEV_ACCESS_SECRET:
            errors.append(
                "JWT_SECRET_KEY is using the default insecure value. "
                "Generate a secure key: openssl rand -hex 32"
            )
        if self.jwt_refresh_secret_key == _DEV_REFRESH_SECRET:
            errors.append(
                "JWT_REFRESH_SECRET_KEY is using the default insecure value."
            )

        if not self.remote_email or not self.remote_password:
            errors.append(
                "REMOTE_EMAIL / REMOTE_PASSWORD are not set. "
                "Folder creation and uploads will fail."
            )

        origins = self.get_cors_origins()
        localhost_origins = [o for o in origins if "localhost" in o or "127.0.0.1" in o]
        if localhost_origins:
            errors.append(
                f"CORS allows localhost origins: {localhost_origins}. "
                "Remove localhost origins for production."
            )

        if errors and self.environment == Environment.PRODUCTION:
            raise ConfigurationError(
                "Production configuration is insecure:\n  - " + "\n  - ".join(errors)
            )
        return errors

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


# Global settings instance
settings = Settings()
