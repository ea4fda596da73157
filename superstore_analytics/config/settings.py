"""
Superstore Retail Analytics
Centralized Configuration Management

Configuration is read from environment variables (and an optional ``.env``
file) through Pydantic settings, validated once and cached.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InputSettings(BaseSettings):
    """Source CSV and parsing configuration"""

    model_config = SettingsConfigDict(env_prefix="SUPERSTORE_INPUT_")

    path: str = Field(default="./data/superstore.csv", description="Order-line CSV path")
    encoding: str = Field(default="latin-1", description="CSV text encoding")
    delimiter: str = Field(default=",", description="Field delimiter")
    date_format: str = Field(default="%m/%d/%y", description="Format of order_date and ship_date")
    index_column: str = Field(default="x", description="Normalized name of the row-number column to drop")
    discount_bucket_width: float = Field(default=0.1, description="Width of discount buckets")
    margin_decimals: int = Field(default=2, description="Decimals kept when rounding margin")
    require_complete: bool = Field(default=True, description="Abort when any declared cell is empty")

    @field_validator("date_format")
    @classmethod
    def validate_date_format(cls, v: str) -> str:
        """Date format must contain day, month and year directives"""
        for directive in ("%d", "%m"):
            if directive not in v:
                raise ValueError(f"Date format must contain {directive}")
        if "%y" not in v and "%Y" not in v:
            raise ValueError("Date format must contain %y or %Y")
        return v

    @field_validator("discount_bucket_width")
    @classmethod
    def validate_bucket_width(cls, v: float) -> float:
        """Bucket width must split [0, 1) into a whole number of buckets"""
        if not 0 < v <= 1:
            raise ValueError("Bucket width must be in (0, 1]")
        count = round(1 / v)
        if abs(count * v - 1) > 1e-9:
            raise ValueError("Bucket width must divide 1 evenly")
        return v


class ReportSettings(BaseSettings):
    """Report output configuration"""

    model_config = SettingsConfigDict(env_prefix="SUPERSTORE_REPORT_")

    output_dir: str = Field(default="./reports", description="Directory for report artifacts")
    render_heatmaps: bool = Field(default=True, description="Render heatmap PNGs for pivot sections")
    heatmap_dpi: int = Field(default=150, description="Heatmap resolution")
    heatmap_cmap: str = Field(default="RdYlGn", description="Heatmap colormap")
    fit_model: bool = Field(default=True, description="Fit the profit regression")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="console", alias="LOG_FORMAT", description="Log format: json or console")
    log_file: Optional[str] = Field(default=None, alias="LOG_FILE", description="Log file path")

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate renderer name"""
        if v.lower() not in ("json", "console"):
            raise ValueError("Log format must be 'json' or 'console'")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="superstore-analytics", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    version: str = Field(default="1.0.0", description="Application version")

    input: InputSettings = Field(default_factory=InputSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are only loaded once.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
