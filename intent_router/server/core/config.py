"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS", description="Allowed CORS origins (use * for all)")
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )
    allow_methods: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_METHODS", description="Allowed HTTP methods (use * for all)"
    )
    allow_headers: list[str] = Field(
        default=["*"], alias="CORS_ALLOW_HEADERS", description="Allowed HTTP headers (use * for all)"
    )

    model_config = {"populate_by_name": True}


class RuntimeConfig(BaseModel):
    """Planner and execution engine configuration."""

    planner_model: Optional[str] = Field(
        default=None,
        alias="PLANNER_MODEL",
        description="pydantic-ai model string for the planner; unset uses the deterministic keyword planner",
    )
    planner_context_budget: int = Field(
        default=4000, alias="PLANNER_CONTEXT_BUDGET", description="Maximum characters of context given to the planner"
    )
    step_timeout_seconds: float = Field(
        default=30.0, alias="STEP_TIMEOUT_SECONDS", description="Per-step executor timeout in seconds"
    )
    tool_provider_probe_timeout_seconds: float = Field(
        default=10.0,
        alias="TOOL_PROVIDER_PROBE_TIMEOUT_SECONDS",
        description="Timeout for listing a tool provider's tools when it is added",
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Intent router server host address to bind to",
        alias="INTENT_ROUTER_SERVER_HOST",
    )
    server_port: int = Field(
        default=8000,
        description="Intent router server port number",
        alias="INTENT_ROUTER_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="INTENT_ROUTER_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="Log format (simple, detailed, json)", alias="LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Also write logs to a file", alias="ENABLE_FILE_LOGGING"
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: str = Field(
        default="sqlite+aiosqlite:///./intent_router.db",
        description="Async SQLAlchemy connection URL; postgres URLs are normalized to asyncpg",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Planner / Runtime Configuration
    # =====================================================================
    planner_model: Optional[str] = Field(default=None, alias="PLANNER_MODEL")
    planner_context_budget: int = Field(default=4000, alias="PLANNER_CONTEXT_BUDGET")
    step_timeout_seconds: float = Field(default=30.0, alias="STEP_TIMEOUT_SECONDS")
    tool_provider_probe_timeout_seconds: float = Field(default=10.0, alias="TOOL_PROVIDER_PROBE_TIMEOUT_SECONDS")

    # =====================================================================
    # CORS Configuration
    # =====================================================================
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(default=["*"], alias="CORS_ALLOW_METHODS")
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def runtime(self) -> RuntimeConfig:
        """Get planner and engine configuration from environment variables."""
        return RuntimeConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
