import logging

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from authflow.auth import jwt_handler
from authflow.core.config import AuthConfig, get_config
from authflow.core.errors import AppError
from authflow.models.user import User
from authflow.services.user_store import UserStore, get_user_store

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def protect(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    store: UserStore = Depends(get_user_store),
    config: AuthConfig = Depends(get_config),
) -> User:
    """Resolve the bearer token to a live user and attach it to ``request.state.user``.

    Token decoding errors are not caught here; the error responder turns them
    into 401 responses.
    """
    if credentials is None or not credentials.credentials:
        raise AppError(
            "You are not logged in! Please log in to get access.",
            status.HTTP_401_UNAUTHORIZED,
        )

    payload = jwt_handler.decode_token(credentials.credentials, config)

    user = store.find_by_id(payload.get("id"))
    if user is None:
        logger.info("Rejected token for missing user id=%s", payload.get("id"))
        raise AppError(
            "The user belonging to this token does no longer exist.",
            status.HTTP_401_UNAUTHORIZED,
        )

    if user.changed_password_after(int(payload["iat"])):
        logger.info("Rejected token issued before password change for user id=%s", user.id)
        raise AppError(
            "User recently changed password! Please log in again.",
            status.HTTP_401_UNAUTHORIZED,
        )

    request.state.user = user
    return user


def restrict_to(*roles: str):
    allowed_roles = frozenset(roles)

    def role_gate(current_user: User = Depends(protect)) -> User:
        if current_user.role not in allowed_roles:
            raise AppError(
                "You do not have permission to perform this action",
                status.HTTP_403_FORBIDDEN,
            )
        return current_user

    return role_gate
