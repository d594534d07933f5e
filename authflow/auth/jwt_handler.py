from datetime import datetime, timezone

import jwt

from authflow.core.config import AuthConfig


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sign_token(user_id: int, config: AuthConfig) -> str:
    issued_at = utcnow()
    payload = {"id": user_id, "iat": issued_at, "exp": issued_at + config.jwt_expires_in}
    return jwt.encode(payload, config.jwt_secret_key, algorithm=config.jwt_algorithm)


def decode_token(token: str, config: AuthConfig) -> dict:
    return jwt.decode(
        token,
        config.jwt_secret_key,
        algorithms=[config.jwt_algorithm],
        options={"require": ["id", "iat", "exp"]},
    )
