from datetime import timedelta

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from authflow.auth import jwt_handler
from authflow.core.config import AuthConfig
from authflow.models.user import User

COOKIE_NAME = "jwt"


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    role: str


def serialize_user(user: User) -> dict:
    return UserResponse.model_validate(user).model_dump()


def send_token(user: User, status_code: int, config: AuthConfig) -> JSONResponse:
    """Sign a token for ``user`` and return it both as a cookie and in the body."""
    token = jwt_handler.sign_token(user.id, config)
    response = JSONResponse(
        status_code=status_code,
        content={
            "status": "success",
            "token": token,
            "data": {"user": serialize_user(user)},
        },
    )
    response.set_cookie(
        key=COOKIE_NAME,
        value=token,
        expires=jwt_handler.utcnow() + timedelta(days=config.jwt_cookie_expires_in_days),
        httponly=True,
        secure=config.is_production,
    )
    return response
