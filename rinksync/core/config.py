"""
Application configuration with environment-specific settings.

Supported environment files (loaded in order of precedence):
1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
2. .env (fallback)

Import defaults (level, skill tier, season year split, clustering gap,
home rinks) live here so that request handlers never hard-code them.
"""
import os
import logging
from pathlib import Path
from typing import List, Literal, Optional
from pydantic_settings import BaseSettings
from pydantic import ConfigDict

# Get the project root directory (3 levels up from this file)
PROJECT_ROOT = Path(__file__).parent.parent.parent

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings with environment-specific configuration."""

    # Environment
    ENVIRONMENT: Literal["development", "production", "test"] = "development"

    model_config = ConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"  # Allow extra fields from .env
    )

    # Application
    APP_NAME: str = "RinkSync Import API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8001

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./rinksync.db")

    # CORS - comma-separated string for env var parsing
    CORS_ORIGINS_STR: str = ""

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    # Team creation defaults used when an import creates a team
    DEFAULT_LEVEL: str = "U13"
    DEFAULT_SKILL_LEVEL: str = "A"

    # Pasted schedules omit the year: months >= cutoff belong to the
    # season start year, earlier months to the following calendar year
    SEASON_START_YEAR: int = 2025
    SEASON_CUTOFF_MONTH: int = 9

    # Tournament clustering
    CLUSTER_MAX_GAP_DAYS: int = 4
    PLACEHOLDER_VENUES: List[str] = ["Add Rink"]

    # Venue substrings (case-insensitive) that mean the tracked team is home
    HOME_VENUE_KEYWORDS: List[str] = [
        "minto",
        "nepean sportsplex",
        "walter baker",
        "bell centennial",
    ]

    # Standings defaults for events without explicit configuration
    DEFAULT_GOAL_DIFF_CAP: Optional[int] = 5

    @property
    def CORS_ORIGINS(self) -> list[str]:
        """Get CORS origins with environment-aware defaults."""
        if self.CORS_ORIGINS_STR:
            origins = [o.strip() for o in self.CORS_ORIGINS_STR.split(",") if o.strip()]
            if origins:
                if self.is_production() and "*" in origins:
                    logger.warning(
                        "Wildcard CORS origins (*) are not allowed in production. "
                        "Please set explicit origins in CORS_ORIGINS_STR environment variable."
                    )
                    return []
                return origins

        if self.is_production():
            logger.warning(
                "CORS_ORIGINS_STR not set in production. "
                "Please set CORS_ORIGINS_STR environment variable with explicit origins."
            )
            return []

        return [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.ENVIRONMENT == "development"

    def validate_required_settings(self) -> list[str]:
        """
        Validate settings that must be set for the current environment.

        Returns:
            List of missing or invalid setting names (empty if all present)
        """
        missing = []

        # A file-backed SQLite database is fine locally, not in production
        if self.is_production() and self.DATABASE_URL.startswith("sqlite"):
            missing.append("DATABASE_URL")

        if not 1 <= self.SEASON_CUTOFF_MONTH <= 12:
            missing.append("SEASON_CUTOFF_MONTH")

        return missing


def _load_env_file() -> Path:
    """
    Load the appropriate environment file based on ENVIRONMENT variable.

    Loads in order of precedence:
    1. .env.{ENVIRONMENT} (e.g., .env.production, .env.development)
    2. .env (fallback)
    """
    environment = os.getenv("ENVIRONMENT", "development")

    env_file = PROJECT_ROOT / f".env.{environment}"
    if env_file.exists():
        logger.info(f"Loading environment from {env_file.name}")
        return env_file

    default_env = PROJECT_ROOT / ".env"
    if default_env.exists():
        logger.info(f"Loading environment from .env (environment: {environment})")
        return default_env

    logger.debug(f"No environment file found for '{environment}' (checked .env.{environment}, .env)")
    return default_env


# Auto-detect and load environment file
_env_file = _load_env_file()


class _SettingsWithEnvFile(Settings):
    model_config = ConfigDict(
        env_file=str(_env_file),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )


settings = _SettingsWithEnvFile()


# Validate settings on startup
missing_settings = settings.validate_required_settings()
if missing_settings:
    logger.warning(f"Invalid settings for {settings.ENVIRONMENT}: {', '.join(missing_settings)}")
    if settings.is_production():
        raise ValueError(
            f"Cannot start in production with invalid settings: {', '.join(missing_settings)}. "
            f"Please set these environment variables in .env.production"
        )
