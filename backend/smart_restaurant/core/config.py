"""Application configuration using pydantic-settings.

All environment variables should be accessed through the settings object
rather than using os.getenv() directly. This ensures:
1. Type validation at startup
2. Centralized configuration
3. Documentation of available settings
4. Proper defaults
"""

import re
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DURATION_RE = re.compile(r"^\s*(\d+)\s*(ms|s|m|h|d|w)?\s*$", re.IGNORECASE)
_DURATION_UNITS = {
    "ms": 0.001,
    "s": 1,
    "m": 60,
    "h": 3600,
    "d": 86400,
    "w": 604800,
}


def parse_duration(value: Optional[str]) -> Optional[timedelta]:
    """Parse a duration such as ``3600``, ``90m``, ``12h`` or ``30d``.

    A bare number is read as seconds. Empty or None means "no duration".
    """
    if value is None or str(value).strip() == "":
        return None
    match = _DURATION_RE.match(str(value))
    if not match:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    seconds = int(amount) * _DURATION_UNITS[(unit or "s").lower()]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive, got {value!r}")
    return timedelta(seconds=seconds)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Database
    database_url: str = "sqlite:///./smart_restaurant.db"
    db_pool_size: int = 10
    db_max_overflow: int = 20
    db_pool_recycle_seconds: int = 1800

    # Security (admin access tokens)
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 240  # 4 hours

    # ==========================================================================
    # Table QR capability tokens
    # ==========================================================================
    qr_token_secret: Optional[str] = None  # falls back to secret_key
    qr_token_algorithm: str = "HS256"
    qr_token_expires_in: Optional[str] = None  # e.g. "30d"; unset = no expiry
    qr_token_leeway_seconds: int = 0
    guest_menu_base_url: str = "http://localhost:3000"

    # Popularity ranking window
    popularity_days_back: int = 30

    # Deprecated: lets admin calls name their restaurant via X-Restaurant-Id
    allow_legacy_restaurant_header: bool = False

    # CORS - comma-separated origins or "*" for development only
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    # Server
    debug: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # API
    api_v1_prefix: str = "/api/v1"

    # Rate limiting
    rate_limit_enabled: bool = True

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        if v == "change-me-in-production":
            import warnings
            warnings.warn(
                "Using default SECRET_KEY is insecure! Set SECRET_KEY environment variable.",
                UserWarning,
                stacklevel=2,
            )
        if len(v) < 32:
            import warnings
            warnings.warn(
                "SECRET_KEY should be at least 32 characters for security.",
                UserWarning,
                stacklevel=2,
            )
        return v

    @field_validator("qr_token_expires_in")
    @classmethod
    def validate_qr_token_expires_in(cls, v: Optional[str]) -> Optional[str]:
        parse_duration(v)
        return v

    @field_validator("popularity_days_back")
    @classmethod
    def validate_popularity_days_back(cls, v: int) -> int:
        if v < 1:
            raise ValueError("POPULARITY_DAYS_BACK must be at least 1")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate settings for production safety."""
        if not self.debug:
            if self.secret_key == "change-me-in-production":
                raise ValueError(
                    "FATAL: Cannot start in production mode with default SECRET_KEY. "
                    "Set a secure SECRET_KEY environment variable (minimum 32 characters)."
                )
            if len(self.secret_key) < 32:
                raise ValueError(
                    f"FATAL: SECRET_KEY must be at least 32 characters in production mode "
                    f"(current length: {len(self.secret_key)})."
                )
            if self.qr_token_secret is not None and len(self.qr_token_secret) < 32:
                raise ValueError(
                    "FATAL: QR_TOKEN_SECRET must be at least 32 characters in production mode."
                )
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list, filtering localhost in production."""
        if self.cors_origins == "*":
            return ["*"]

        origins = [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

        if not self.debug:
            localhost_patterns = ["localhost", "127.0.0.1", "0.0.0.0"]
            origins = [o for o in origins if not any(p in o for p in localhost_patterns)]

        return origins


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()


@dataclass(frozen=True)
class QrTokenConfig:
    """Signing material for table QR tokens.

    Built once from settings and handed to the issuer and verifier. Lives
    for the whole process and is never mutated.
    """

    secret: str
    algorithm: str = "HS256"
    expires_in: Optional[timedelta] = None
    leeway: int = 0

    @classmethod
    def from_settings(cls, s: Settings) -> "QrTokenConfig":
        return cls(
            secret=s.qr_token_secret or s.secret_key,
            algorithm=s.qr_token_algorithm,
            expires_in=parse_duration(s.qr_token_expires_in),
            leeway=s.qr_token_leeway_seconds,
        )


@lru_cache
def get_qr_token_config() -> QrTokenConfig:
    """Get the process-wide QR token configuration."""
    return QrTokenConfig.from_settings(get_settings())
