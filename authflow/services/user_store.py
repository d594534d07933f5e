"""Persistence for :class:`~authflow.models.user.User` records.

Every write goes through :meth:`UserStore.save`, which validates the record
(unless told not to), hashes a pending password and commits.
"""

import logging
from datetime import datetime, timedelta

from email_validator import EmailNotValidError, validate_email
from fastapi import Depends, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from authflow.auth import passwords
from authflow.core.config import AuthConfig, get_config
from authflow.core.errors import AppError, validation_error
from authflow.database import get_db
from authflow.models.user import ROLE_USER, ROLES, User, to_naive_utc, utcnow_naive

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class UserStore:
    def __init__(self, db: Session, config: AuthConfig):
        self._db = db
        self._config = config

    def create(
        self,
        *,
        name: str | None,
        email: str | None,
        password: str | None,
        password_confirm: str | None,
        password_changed_at: datetime | None = None,
    ) -> User:
        user = User(
            name=name,
            email=email,
            role=ROLE_USER,
            password_changed_at=to_naive_utc(password_changed_at),
        )
        user.set_password(password, password_confirm)
        return self.save(user)

    def find_by_email(self, email: str | None) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self._db.query(User).filter(User.email == normalized).first()

    def find_by_id(self, user_id) -> User | None:
        if user_id is None:
            return None
        return self._db.get(User, user_id)

    def find_by_reset_token(self, hashed_token: str) -> User | None:
        """Return the user holding ``hashed_token`` if it has not expired yet."""
        return (
            self._db.query(User)
            .filter(
                User.password_reset_token == hashed_token,
                User.password_reset_expires > utcnow_naive(),
            )
            .first()
        )

    def list_users(self) -> list[User]:
        return self._db.query(User).order_by(User.id).all()

    def save(self, user: User, *, validate: bool = True) -> User:
        is_new = user.id is None
        if user.email is not None:
            user.email = normalize_email(user.email)

        if validate:
            messages = self._validation_messages(user, is_new)
            if messages:
                raise validation_error(messages)

        if user.pending_password is not None:
            user.hashed_password = passwords.hash_password(
                user.pending_password,
                rounds=self._config.bcrypt_rounds,
            )
            if not is_new:
                # Backdated so a token signed right after this save is not rejected.
                user.password_changed_at = utcnow_naive() - timedelta(seconds=1)
            user.clear_pending_password()

        if is_new:
            self._db.add(user)
        try:
            self._db.commit()
        except IntegrityError as exc:
            self._db.rollback()
            logger.info("Rejected save of user with duplicate email")
            raise AppError(
                f"Duplicate field value: {user.email}. Please use another value!",
                status.HTTP_400_BAD_REQUEST,
            ) from exc
        self._db.refresh(user)
        return user

    def _validation_messages(self, user: User, is_new: bool) -> list[str]:
        messages: list[str] = []

        if not (user.name or "").strip():
            messages.append("Please tell us your name!")

        if not user.email:
            messages.append("Please provide your email")
        else:
            try:
                validate_email(user.email, check_deliverability=False)
            except EmailNotValidError:
                messages.append("Please provide a valid email")

        if user.role not in ROLES:
            messages.append(f"Role must be one of: {', '.join(ROLES)}")

        password = user.pending_password
        if password is None:
            if is_new or user.password_change_requested:
                messages.append("Please provide a password")
            return messages

        if len(password) < MIN_PASSWORD_LENGTH:
            messages.append(f"A password must have at least {MIN_PASSWORD_LENGTH} characters")
        if user.pending_password_confirm is None:
            messages.append("Please confirm your password")
        elif user.pending_password_confirm != password:
            messages.append("Passwords are not the same!")

        return messages


def get_user_store(
    db: Session = Depends(get_db),
    config: AuthConfig = Depends(get_config),
) -> UserStore:
    return UserStore(db, config)
