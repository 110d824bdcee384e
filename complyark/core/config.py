# complyark/core/config.py - Case desk configuration
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List, Literal

class Settings(BaseSettings):
    """
    Settings for the ComplyArk case desk API
    """
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Storage Settings
    STORE_BACKEND: Literal["memory", "database"] = Field(
        "memory", description="Case store backend: process memory or SQLAlchemy database"
    )
    DATABASE_URL: str = Field(
        "sqlite+aiosqlite:///./complyark.db", description="SQLAlchemy async database URL"
    )
    SEED_DEMO_DATA: bool = Field(False, description="Seed a demo organisation and users on startup")

    # Application Settings
    ENVIRONMENT: str = Field("development", description="Environment name")
    LOG_LEVEL: str = Field("INFO", description="Log level")

    # Logging Configuration
    ENABLE_JSON_LOGGING: bool = Field(True, description="Enable JSON structured logging")

    # OpenTelemetry Tracing Settings
    ENABLE_OTEL_EXPORTER: bool = Field(False, description="Enable OpenTelemetry tracer provider")
    ENABLE_OTEL_CONSOLE_EXPORT: bool = Field(False, description="Enable OpenTelemetry console export (JSON spam)")
    ENABLE_EXTERNAL_TRACING: bool = Field(False, description="Enable external OTLP tracing")
    OTLP_ENDPOINT: str = Field("http://localhost:4317", description="OTLP endpoint for external tracing")

    # CORS Settings
    CORS_ORIGINS: str = Field(
        "http://localhost:8080,http://127.0.0.1:8080",
        description="Comma-separated list of allowed CORS origins"
    )

    # Rate Limiting Settings
    RATE_LIMIT_ENABLED: bool = Field(True, description="Enable rate limiting")
    DEFAULT_RATE_LIMIT: str = Field("100/minute", description="Default rate limit")
    INTAKE_RATE_LIMIT: str = Field("10/minute", description="Public request submission rate limit")

    # Case Workflow Settings
    REQUIRE_CLOSURE_COMMENT: bool = Field(False, description="Reject closing a case without a comment")
    PUBLIC_REQUEST_BASE_URL: str = Field(
        "http://localhost:8080/request-page", description="Base URL of the public request page"
    )

    # Performance Settings
    DB_POOL_SIZE: int = Field(20, description="Database connection pool size")
    DB_MAX_OVERFLOW: int = Field(0, description="Database max overflow connections")

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert CORS_ORIGINS string to list"""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def should_use_json_logging(self) -> bool:
        """Use JSON logging in production or when explicitly enabled"""
        return self.ENVIRONMENT == "production" or self.ENABLE_JSON_LOGGING

# Create settings instance
settings = Settings()
