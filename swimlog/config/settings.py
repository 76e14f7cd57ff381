"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables (or a .env file) with
sensible defaults. Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock mode keeps all data in memory, which is what tests and quick local
runs want.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    app_title: str = "SwimLog API"
    api_version: str = "v1"

    # Storage Configuration
    storage_mock_mode: bool = Field(
        default=False,
        description="Keep data in memory instead of files. Data is lost on restart."
    )
    storage_data_dir: str = Field(
        default="~/.swimlog",
        description="Directory holding one JSON file per storage key."
    )

    # Data Lifecycle
    migration_enabled: bool = Field(
        default=True,
        description="Migrate the legacy entry log into swimmers and times at startup."
    )
    default_unit: str = Field(
        default="m",
        description="Distance unit used until the user picks one: 'm' or 'y'."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="http://localhost:8081,http://localhost:19006",
        description="Comma-separated list of allowed CORS origins. Use * for development only."
    )

    model_config = SettingsConfigDict(
        env_prefix="SWIMLOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    def validate_required_fields(self) -> list[str]:
        """
        Validate settings whose requirements depend on other settings.

        Returns a list of problems. This is separate from Pydantic
        validation because the data directory only matters outside
        mock mode.
        """
        missing = []

        if not self.storage_mock_mode and not self.storage_data_dir.strip():
            missing.append("SWIMLOG_STORAGE_DATA_DIR")

        if self.default_unit not in ("m", "y"):
            missing.append("SWIMLOG_DEFAULT_UNIT (must be 'm' or 'y')")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, call get_settings.cache_clear() to reset.
    """
    return Settings()
