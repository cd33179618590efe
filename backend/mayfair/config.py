"""
Mayfair Backend — Application Configuration
=============================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by main.py and the route modules; tests build their own
       Settings instances and hand them to create_app().
When:  Loaded once at module import time.

Naming note:
    The frontend and deployment tooling still export NODE_ENV, so the
    environment name accepts both ENVIRONMENT and NODE_ENV.
"""

from pathlib import Path
from typing import List

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings

# backend/, the directory holding this package
BACKEND_DIR = Path(__file__).resolve().parent.parent


def _normalize_prefix(value: str) -> str:
    """'/api/' → '/api', 'api' → '/api'. The empty string is not a valid prefix."""
    stripped = value.strip().strip("/")
    if not stripped:
        raise ValueError("URL prefix must contain at least one path segment")
    return "/" + stripped


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development.
    Attributes are grouped by concern for readability.
    """

    # ── Application ───────────────────────────────────────────────────────
    app_name: str = Field(default="Mayfair Hotel Management API")
    app_version: str = Field(default="1.0.0")

    # What: Deployment environment reported by /health and /api/debug
    environment: str = Field(
        default="production",
        validation_alias=AliasChoices("environment", "node_env"),
    )

    # ── Routing ───────────────────────────────────────────────────────────
    # What: Every path under api_prefix belongs to the API; anything else is
    # handed to the frontend (static asset or SPA document).
    api_prefix: str = Field(default="/api")

    # What: Prefix under which feature routers are mounted (/api/v1/rooms, ...)
    api_v1_prefix: str = Field(default="/api/v1")

    # What: Import package holding one module per feature, each exposing `router`
    # Example: mayfair_features.bookings → router mounted at /api/v1/bookings
    feature_package: str = Field(default="mayfair_features")

    @field_validator("api_prefix", "api_v1_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        return _normalize_prefix(v)

    # ── Frontend ──────────────────────────────────────────────────────────
    # What: Directory holding the built single-page app (index.html + assets)
    # Relative paths are anchored to backend/, not to the working directory,
    # so the default finds <repo>/frontend/build wherever uvicorn starts.
    frontend_build_dir: str = Field(default="../frontend/build", validate_default=True)
    spa_index_file: str = Field(default="index.html")

    @field_validator("frontend_build_dir")
    @classmethod
    def anchor_build_dir(cls, v: str) -> str:
        path = Path(v).expanduser()
        if not path.is_absolute():
            path = BACKEND_DIR / path
        return str(path.resolve())

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs (parsed by cors_origins_list below)
    cors_origins: str = Field(
        default=(
            "http://localhost:3001,"
            "http://localhost:3002,"
            "https://mayfair-steel.vercel.app"
        )
    )

    # What: Single extra origin, set by the hosting platform per deployment
    cors_origin: str = Field(default="")

    @property
    def cors_origins_list(self) -> List[str]:
        """Configured origins plus CORS_ORIGIN, without blanks or duplicates."""
        origins = [origin.strip() for origin in self.cors_origins.split(",")]
        origins.append(self.cors_origin.strip())
        unique: List[str] = []
        for origin in origins:
            if origin and origin not in unique:
                unique.append(origin)
        return unique

    # ── Request Handling ──────────────────────────────────────────────────
    # What: Largest accepted request body (declared Content-Length), in bytes
    # Default: 10MB = 10 * 1024 * 1024 = 10485760
    max_body_size: int = Field(default=10_485_760, ge=1024)

    # What: Responses smaller than this are sent uncompressed
    gzip_minimum_size: int = Field(default=500, ge=0)

    # What: Use the first X-Forwarded-For hop as the client address in access logs
    # The backend runs behind a single reverse proxy in every deployment.
    trust_proxy: bool = Field(default=True)

    # What: Exposes GET /api/debug (which env vars are set, never their values)
    enable_debug_endpoint: bool = Field(default=False)

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }


# Singleton instance, imported throughout the application
settings = Settings()
