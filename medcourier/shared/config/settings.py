# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

import sys
from functools import lru_cache

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_GROUP_CONFIG = SettingsConfigDict(
    env_file=".env", env_file_encoding="utf-8", validate_by_name=True, extra="ignore"
)


def _parse_bool(value: str | bool) -> bool:
    if isinstance(value, str):
        return value.lower() in ("1", "true", "yes")
    return bool(value)


class DatabaseConfig(BaseSettings):
    url: str = Field("sqlite:///medcourier.db", alias="DATABASE_URL")
    pool_size: int = Field(10, ge=1, alias="DATABASE_POOL_SIZE")
    max_overflow: int = Field(5, ge=0, alias="DATABASE_MAX_OVERFLOW")
    pool_timeout: float = Field(30.0, ge=0.1, alias="DATABASE_POOL_TIMEOUT")

    model_config = _GROUP_CONFIG


class CacheConfig(BaseSettings):
    ttl_seconds: int = Field(60, ge=1, alias="CACHE_TTL")
    max_size: int = Field(1000, ge=1, alias="CACHE_MAX_SIZE")
    sweep_interval: float = Field(300.0, ge=1.0, alias="CACHE_SWEEP_INTERVAL")

    model_config = _GROUP_CONFIG


class SecurityConfig(BaseSettings):
    # Session cookie
    cookie_secure: bool = Field(False, alias="COOKIE_SECURE")
    cookie_samesite: str = Field("Lax", alias="COOKIE_SAMESITE")
    session_duration_days: int = Field(7, ge=1, alias="SESSION_DURATION_DAYS")

    # CORS
    allowed_origins: list[str] = Field(["*"], alias="ALLOWED_ORIGINS")

    # Rate limiting
    enable_rate_limit: bool = Field(True, alias="ENABLE_RATE_LIMIT")
    auth_rate_limit: int = Field(5, ge=1, alias="RL_AUTH_LIMIT")
    auth_rate_window: float = Field(15 * 60.0, ge=1.0, alias="RL_AUTH_WINDOW")
    api_rate_limit: int = Field(60, ge=1, alias="RL_API_LIMIT")
    api_rate_window: float = Field(60.0, ge=1.0, alias="RL_API_WINDOW")

    # HSTS
    enable_hsts: bool = Field(False, alias="ENABLE_HSTS")

    model_config = _GROUP_CONFIG

    @field_validator("allowed_origins", mode="before")
    @classmethod
    def _parse_origins(cls, value: str | list[str]) -> list[str]:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @field_validator("cookie_secure", "enable_rate_limit", "enable_hsts", mode="before")
    @classmethod
    def _parse_flags(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class LockoutConfig(BaseSettings):
    max_attempts: int = Field(5, ge=1, alias="LOCKOUT_MAX_ATTEMPTS")
    window_minutes: int = Field(15, ge=1, alias="LOCKOUT_WINDOW_MINUTES")
    duration_minutes: int = Field(15, ge=1, alias="LOCKOUT_DURATION_MINUTES")

    model_config = _GROUP_CONFIG


class PasswordResetConfig(BaseSettings):
    token_ttl_minutes: int = Field(60, ge=1, alias="RESET_TOKEN_TTL_MINUTES")

    model_config = _GROUP_CONFIG


class GeocodingConfig(BaseSettings):
    api_key: str | None = Field(None, alias="GOOGLE_MAPS_API_KEY")
    base_url: str = Field(
        "https://maps.googleapis.com/maps/api/geocode/json", alias="GEOCODING_URL"
    )
    timeout: float = Field(10.0, ge=0.1, alias="GEOCODING_TIMEOUT")
    cache_ttl: int = Field(3600, ge=1, alias="GEOCODING_CACHE_TTL")

    model_config = _GROUP_CONFIG


class ResilienceConfig(BaseSettings):
    max_retries: int = Field(2, ge=0, alias="RESILIENCE_RETRIES")
    backoff_base: float = Field(0.5, ge=0.0, alias="RESILIENCE_BACKOFF_BASE")
    backoff_cap: float = Field(4.0, ge=0.0, alias="RESILIENCE_BACKOFF_CAP")
    circuit_fail_threshold: int = Field(5, ge=1, alias="RESILIENCE_CIRCUIT_THRESHOLD")
    circuit_reset_timeout: float = Field(60.0, ge=1.0, alias="RESILIENCE_CIRCUIT_RESET")

    model_config = _GROUP_CONFIG


class LoggingConfig(BaseSettings):
    level: str | None = Field(None, alias="LOG_LEVEL")
    file: str | None = Field(None, alias="LOG_FILE")
    rotation: str = Field("10 MB", alias="LOG_ROTATION")
    retention: str = Field("14 days", alias="LOG_RETENTION")
    json_output: bool = Field(False, alias="LOG_JSON")

    model_config = _GROUP_CONFIG

    @field_validator("json_output", mode="before")
    @classmethod
    def _parse_flag(cls, value: str | bool) -> bool:
        return _parse_bool(value)


class ObservabilityConfig(BaseSettings):
    metrics_enabled: bool = Field(True, alias="METRICS_ENABLED")

    model_config = _GROUP_CONFIG

    @field_validator("metrics_enabled", mode="before")
    @classmethod
    def _parse_flag(cls, value: str | bool) -> bool:
        return _parse_bool(value)


def _database_config_factory() -> DatabaseConfig:
    return DatabaseConfig()  # type: ignore[call-arg]


def _cache_config_factory() -> CacheConfig:
    return CacheConfig()  # type: ignore[call-arg]


def _security_config_factory() -> SecurityConfig:
    return SecurityConfig()  # type: ignore[call-arg]


def _lockout_config_factory() -> LockoutConfig:
    return LockoutConfig()  # type: ignore[call-arg]


def _password_reset_config_factory() -> PasswordResetConfig:
    return PasswordResetConfig()  # type: ignore[call-arg]


def _geocoding_config_factory() -> GeocodingConfig:
    return GeocodingConfig()  # type: ignore[call-arg]


def _resilience_config_factory() -> ResilienceConfig:
    return ResilienceConfig()  # type: ignore[call-arg]


def _observability_config_factory() -> ObservabilityConfig:
    return ObservabilityConfig()  # type: ignore[call-arg]


def _logging_config_factory() -> LoggingConfig:
    return LoggingConfig()  # type: ignore[call-arg]


class AppConfig(BaseSettings):
    app_env: str = Field("development", alias="APP_ENV")
    secret_key: str = Field("dev", alias="SECRET_KEY")
    cron_secret: str | None = Field(None, alias="CRON_SECRET")
    public_base_url: str = Field("http://localhost:3000", alias="PUBLIC_BASE_URL")
    debug_logging: bool = Field(False, alias="DEBUG_LOGGING")

    database: DatabaseConfig = Field(default_factory=_database_config_factory)
    cache: CacheConfig = Field(default_factory=_cache_config_factory)
    security: SecurityConfig = Field(default_factory=_security_config_factory)
    lockout: LockoutConfig = Field(default_factory=_lockout_config_factory)
    password_reset: PasswordResetConfig = Field(default_factory=_password_reset_config_factory)
    geocoding: GeocodingConfig = Field(default_factory=_geocoding_config_factory)
    resilience: ResilienceConfig = Field(default_factory=_resilience_config_factory)
    observability: ObservabilityConfig = Field(default_factory=_observability_config_factory)
    logging: LoggingConfig = Field(default_factory=_logging_config_factory)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        validate_assignment=True,
        extra="ignore",
    )

    @field_validator("debug_logging", mode="before")
    @classmethod
    def _parse_debug_logging(cls, value: str | bool) -> bool:
        return _parse_bool(value)

    @model_validator(mode="after")
    def _validate_production_settings(self) -> "AppConfig":
        if not self.is_production():
            return self

        if self.secret_key in ("dev", "development", "test", "") or len(self.secret_key) < 32:
            print(
                "\n❌ CRITICAL SECURITY ERROR: Insecure SECRET_KEY detected in production!\n"
                "   SECRET_KEY signs the auth_session cookie and must be at least 32 random "
                "characters.\n"
                "   Generate one with: "
                "python -c \"import secrets; print(secrets.token_urlsafe(32))\"\n",
                file=sys.stderr,
            )
            sys.exit(1)

        warnings = []
        if "*" in self.security.allowed_origins:
            warnings.append("⚠️  CORS allows wildcard (*) origins")
        if not self.security.enable_hsts:
            warnings.append("⚠️  HSTS is DISABLED (recommended for HTTPS)")
        if not self.security.enable_rate_limit:
            warnings.append("⚠️  Rate limiting is DISABLED")
        if not self.cron_secret:
            warnings.append("⚠️  CRON_SECRET is not set, scheduled job endpoints are closed")

        if warnings:
            print("\n⚠️  PRODUCTION SECURITY WARNINGS:", file=sys.stderr)
            for warning in warnings:
                print(f"   {warning}", file=sys.stderr)
            print(
                "   Consider enabling these security features in production.\n",
                file=sys.stderr,
            )

        return self

    def is_production(self) -> bool:
        return self.app_env.lower() in ("production", "prod")

    @property
    def cookie_secure(self) -> bool:
        return self.security.cookie_secure or self.is_production()


@lru_cache(maxsize=1)
def load_config() -> AppConfig:
    return AppConfig()  # type: ignore[call-arg]


__all__ = ["AppConfig", "load_config"]
