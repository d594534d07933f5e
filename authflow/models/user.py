"""User model definitions."""

from datetime import datetime, timedelta, timezone

from sqlalchemy import Column, DateTime, Integer, String

from authflow.auth import passwords
from authflow.database import Base

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime | None) -> datetime | None:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _timestamp(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


class User(Base):
    """Represents an application user.

    ``pending_password`` and ``pending_password_confirm`` are not columns.
    They hold a new plain text password until the store validates and hashes
    it on save.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    role = Column(String, nullable=False, default=ROLE_USER)
    hashed_password = Column(String, nullable=False)
    password_changed_at = Column(DateTime, nullable=True)
    password_reset_token = Column(String, nullable=True, index=True)
    password_reset_expires = Column(DateTime, nullable=True)

    pending_password = None
    pending_password_confirm = None
    password_change_requested = False

    def set_password(self, password: str | None, password_confirm: str | None) -> None:
        self.password_change_requested = True
        self.pending_password = password
        self.pending_password_confirm = password_confirm

    def clear_pending_password(self) -> None:
        self.password_change_requested = False
        self.pending_password = None
        self.pending_password_confirm = None

    def correct_password(self, candidate: str | None) -> bool:
        return passwords.verify_password(candidate, self.hashed_password)

    def changed_password_after(self, jwt_issued_at: int) -> bool:
        """True when the password changed after a token issued at ``jwt_issued_at`` (epoch seconds)."""
        if self.password_changed_at is None:
            return False
        return jwt_issued_at < _timestamp(self.password_changed_at)

    def create_password_reset_token(self, expires_minutes: int = 10) -> str:
        """Store the hash of a fresh reset token and return the plain token."""
        reset_token = passwords.generate_reset_token()
        self.password_reset_token = passwords.hash_reset_token(reset_token)
        self.password_reset_expires = utcnow_naive() + timedelta(minutes=expires_minutes)
        return reset_token

    def clear_password_reset_token(self) -> None:
        self.password_reset_token = None
        self.password_reset_expires = None
