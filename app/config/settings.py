"""
Environment configuration for the hostel attendance and gate pass service.
Uses Pydantic's settings management to handle environment variables
with proper type validation and default values.

Values that administrators tune at runtime (hostel coordinates, geofence
radius, attendance window, gate pass limits) live in the system config
row; the DEFAULT_* fields below only seed that row on first use.
"""

from typing import List, Union
from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path('.') / '.env'
load_dotenv(dotenv_path=env_path)


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # Application configuration
    APP_NAME: str = Field(default="Hostel Gate & Attendance Service", alias="PROJECT_NAME")
    API_VERSION: str = Field(default="1.0.0", alias="PROJECT_VERSION")
    API_V1_STR: str = "/api/v1"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    CORS_ORIGINS: List[str] = Field(default=["*"], alias="BACKEND_CORS_ORIGINS")

    # Database configuration
    DATABASE_URL: str = "sqlite:///./hostel.db"
    DB_POOL_SIZE: int = 20
    DB_POOL_OVERFLOW: int = 10
    DB_ECHO: bool = False
    DB_SLOW_QUERY_SECONDS: float = 0.5

    # Monitoring and logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = False
    ENABLE_STRUCTURED_LOGGING: bool = True
    SENTRY_DSN: Union[str, None] = None

    # Seeds for the system config singleton
    DEFAULT_HOSTEL_NAME: str = "Main Hostel Building"
    DEFAULT_HOSTEL_LATITUDE: float = 28.986701
    DEFAULT_HOSTEL_LONGITUDE: float = 77.152050
    DEFAULT_GEOFENCE_RADIUS_METERS: float = 50.0
    DEFAULT_ATTENDANCE_WINDOW_ENABLED: bool = True
    DEFAULT_ATTENDANCE_START_HOUR: int = Field(default=19, ge=0, le=23)
    DEFAULT_ATTENDANCE_END_HOUR: int = Field(default=22, ge=0, le=23)
    DEFAULT_ATTENDANCE_TIMEZONE: str = "Asia/Kolkata"
    DEFAULT_ATTENDANCE_GRACE_MINUTES: int = Field(default=5, ge=0)
    DEFAULT_MAX_GATE_PASS_DAYS: int = Field(default=14, gt=0)
    DEFAULT_MAX_PENDING_PASSES: int = Field(default=3, gt=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator('CORS_ORIGINS', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS_ORIGINS from string to list"""
        if isinstance(v, str):
            # Handle JSON string format from .env
            if v.startswith('[') and v.endswith(']'):
                import json
                try:
                    return json.loads(v)
                except json.JSONDecodeError:
                    pass
            return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in levels:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(levels)}")
        return v.upper()

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v not in ("text", "json"):
            raise ValueError("LOG_FORMAT must be 'text' or 'json'")
        return v

    def get_database_url(self) -> str:
        """Return the SQLAlchemy database URL"""
        return self.DATABASE_URL

    def is_sqlite(self) -> bool:
        return self.DATABASE_URL.startswith("sqlite")

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.ENVIRONMENT == "development"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


settings = get_settings()
