from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "SchoolOps Provisioning"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True  # Set to False in production

    # Security
    log_user_emails: bool = False  # Set to False in production for GDPR compliance
    csp_production: str = "default-src 'self'; frame-ancestors 'none'"

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Caller authentication (tokens are issued by the identity provider)
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    jwt_audience: str | None = "authenticated"

    # Identity provider (GoTrue-compatible admin API)
    identity_provider_url: str = "http://localhost:9999"
    identity_provider_service_key: str = ""
    identity_request_timeout_seconds: float = 10.0
    identity_list_page_size: int = 1000
    identity_list_max_pages: int = 20

    # Bulk import
    bulk_import_max_rows: int = 500

    # Secret-guarded variants (unset disables the endpoint)
    bootstrap_secret: str | None = None
    master_recovery_secret: str | None = None

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "JWT_SECRET_KEY must be changed from default value. "
                "Use the JWT secret of the identity provider project."
            )
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Validate CORS origins - reject wildcards when credentials are used."""
        for origin in v:
            if origin == "*":
                raise ValueError(
                    "CORS wildcard '*' is not allowed when allow_credentials=True. "
                    "Specify explicit origins instead."
                )
        return v

    @field_validator("identity_provider_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("identity_list_page_size", "identity_list_max_pages", "bulk_import_max_rows")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
