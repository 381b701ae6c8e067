"""
Family Cookbook Backend — Application Configuration
=====================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types/ranges, and provides a module-level `settings` object.
Who:   Read by the application factory; passed down to the database layer,
       middleware and services that need it.
When:  Loaded once at import time. Tests build their own Settings instance
       and hand it to create_app().

Secrets:
    SESSION_SECRET and ADMIN_PASSWORD have no usable defaults. They must be
    supplied through the environment in any real deployment;
    validate_required_for_production() reports them at startup.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern. Every field maps to an upper-case
    environment variable of the same name (DATABASE_URL, SESSION_SECRET, ...).
    """

    # ── Database ──────────────────────────────────────────────────────────
    # Format: <dialect>+<async driver>://...  The default is a local SQLite file.
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/cookbook.db",
        description="Async SQLAlchemy connection URL",
    )

    # Pool sizing only applies to server databases (PostgreSQL, MySQL).
    db_pool_size: int = Field(default=5, ge=1, le=100)
    db_max_overflow: int = Field(default=10, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)

    # ── File Storage ──────────────────────────────────────────────────────
    # Uploaded documents live here only while their text is extracted.
    storage_root: str = Field(default="./storage/uploads")

    # 10 MiB = 10 * 1024 * 1024
    max_file_size: int = Field(default=10_485_760, ge=1_024, le=52_428_800)

    # Directory holding the browser UI; mounted at "/" when it exists.
    static_dir: str = Field(default="./public")

    # ── Sessions ──────────────────────────────────────────────────────────
    session_secret: str = Field(
        default="",
        description="Key used to sign the session cookie",
    )
    session_cookie_name: str = Field(default="cookbook_session")
    # Fixed lifetime from issuance, in seconds (24h).
    session_max_age: int = Field(default=86_400, ge=60, le=2_592_000)
    session_cookie_secure: bool = Field(default=False)

    # ── Bootstrap Admin ───────────────────────────────────────────────────
    # Inserted once, only when the users table is empty.
    admin_username: str = Field(default="admin")
    admin_password: str = Field(default="")
    admin_display_name: str = Field(default="Admin")

    # bcrypt work factor; 4 is the library minimum and is used by the tests.
    bcrypt_rounds: int = Field(default=12, ge=4, le=16)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list of origins.
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

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
        "extra": "ignore",
    }

    def validate_required_for_production(self) -> None:
        """
        What:  Validates that secrets are configured.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if not self.session_secret:
            errors.append(
                "SESSION_SECRET is not set. Sessions will be signed with a "
                "temporary key and will not survive a restart."
            )
        if not self.admin_password:
            errors.append(
                "ADMIN_PASSWORD is not set. The bootstrap admin account "
                "cannot be created on an empty database."
            )
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Default instance used by `cookbook.main:app`
settings = Settings()
