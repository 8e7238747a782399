"""
Gravity Books Analytics
Centralized Configuration Management

Pydantic settings with environment variable support, validation and type safety.
"""

from datetime import date
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Bookstore Database Configuration"""
    
    model_config = SettingsConfigDict(env_prefix="DATABASE_")
    
    url: Optional[str] = Field(default=None, description="SQLAlchemy URL (overrides host/port)")
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    name: str = Field(default="gravity_books", description="Database name")
    user: str = Field(default="gravity", description="Database user")
    password: SecretStr = Field(default="gravity_password", description="Database password")
    echo: bool = Field(default=False, description="Echo SQL queries")
    pool_pre_ping: bool = Field(default=True, description="Verify connections before use")
    
    def get_url(self) -> str:
        """Database URL - uses DATABASE_URL if set, otherwise builds a psycopg2 URL"""
        if self.url:
            return self.url
        return (
            f"postgresql+psycopg2://{self.user}:{self.password.get_secret_value()}"
            f"@{self.host}:{self.port}/{self.name}"
        )


class CalendarSettings(BaseSettings):
    """Calendar dimension bounds"""
    
    model_config = SettingsConfigDict(env_prefix="CALENDAR_")
    
    start_date: date = Field(default=date(2020, 1, 1), description="First calendar day")
    # None means "today", resolved by the caller at run time
    end_date: Optional[date] = Field(default=None, description="Last calendar day")


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""
    
    model_config = SettingsConfigDict(env_prefix="")
    
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")
    
    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format value"""
        allowed = ["json", "console"]
        if v.lower() not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
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
    
    # Application
    app_env: str = Field(default="development", description="Environment")
    version: str = Field(default="1.0.0", description="Application version")
    
    # API Server
    api_host: str = Field(default="127.0.0.1", description="API host")
    api_port: int = Field(default=8000, description="API port")
    
    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)
    
    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()
    
    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.
    
    Uses LRU cache to ensure settings are only loaded once.
    
    Returns:
        Settings: Application settings instance
    """
    return Settings()
