import os
import re
from dataclasses import dataclass, field
from datetime import timedelta

from dotenv import load_dotenv
from fastapi import Request


DEFAULT_JWT_SECRET_KEY = "change-me"

_DURATION_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_DURATION_UNITS = {
    "": "seconds",
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_list(value: str | None, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_duration(value: str) -> timedelta:
    """Parse expiry strings such as ``90d``, ``12h``, ``30m``, ``45s`` or ``3600``."""
    match = _DURATION_PATTERN.match(value or "")
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")
    amount, unit = match.groups()
    return timedelta(**{_DURATION_UNITS[unit]: int(amount)})


@dataclass(frozen=True)
class AuthConfig:
    app_env: str = "development"
    database_url: str = "sqlite:///./authflow.db"

    jwt_secret_key: str = DEFAULT_JWT_SECRET_KEY
    jwt_algorithm: str = "HS256"
    jwt_expires_in: timedelta = timedelta(days=90)
    jwt_cookie_expires_in_days: int = 90

    bcrypt_rounds: int = 12
    password_reset_expires_minutes: int = 10

    email_host: str = "localhost"
    email_port: int = 587
    email_username: str = ""
    email_password: str = ""
    email_from: str = "authflow <noreply@authflow.local>"
    email_use_tls: bool = False

    cors_origins: tuple[str, ...] = field(default=("http://localhost:4200",))
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"


def load_config() -> AuthConfig:
    load_dotenv()
    return AuthConfig(
        app_env=os.getenv("APP_ENV", "development"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./authflow.db"),
        jwt_secret_key=os.getenv("JWT_SECRET_KEY", DEFAULT_JWT_SECRET_KEY),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        jwt_expires_in=parse_duration(os.getenv("JWT_EXPIRES_IN", "90d")),
        jwt_cookie_expires_in_days=int(os.getenv("JWT_COOKIE_EXPIRES_IN", "90")),
        bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "12")),
        password_reset_expires_minutes=int(os.getenv("PASSWORD_RESET_EXPIRES_MINUTES", "10")),
        email_host=os.getenv("EMAIL_HOST", "localhost"),
        email_port=int(os.getenv("EMAIL_PORT", "587")),
        email_username=os.getenv("EMAIL_USERNAME", ""),
        email_password=os.getenv("EMAIL_PASSWORD", ""),
        email_from=os.getenv("EMAIL_FROM", "authflow <noreply@authflow.local>"),
        email_use_tls=_get_bool(os.getenv("EMAIL_USE_TLS"), default=False),
        cors_origins=_get_list(os.getenv("CORS_ORIGINS"), default=("http://localhost:4200",)),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def validate_runtime_config(config: AuthConfig) -> None:
    if config.is_production and config.jwt_secret_key == DEFAULT_JWT_SECRET_KEY:
        raise RuntimeError("JWT_SECRET_KEY must be set in production.")


def get_config(request: Request) -> AuthConfig:
    return request.app.state.config
