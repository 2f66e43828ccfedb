# wasfa/utils/token_utils.py
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Uuid, text
from sqlalchemy.orm import Mapped, Session, mapped_column

from wasfa.models.base import Base
from wasfa.utils.datetime_utils import as_utc, utc_now


class PasswordResetToken(Base):
    """
    Single-use password reset token.
    """

    __tablename__ = "password_reset_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )


def generate_token() -> str:
    """Generate a secure random url-safe token."""
    return secrets.token_urlsafe(32)


def create_password_reset_token(
    db: Session,
    user_id: uuid.UUID,
    expires_in_hours: int = 1,
) -> str:
    """
    Create a password reset token for a user.
    Returns the token string.
    """
    token = generate_token()
    reset = PasswordResetToken(
        user_id=user_id,
        token=token,
        expires_at=utc_now() + timedelta(hours=expires_in_hours),
    )
    db.add(reset)
    db.flush()
    return token


def verify_password_reset_token(db: Session, token: str) -> Optional[PasswordResetToken]:
    """
    Return the PasswordResetToken if valid.
    Returns None if token is unknown, expired, or already used.
    """
    reset = db.query(PasswordResetToken).filter(PasswordResetToken.token == token).first()
    if not reset:
        return None

    if reset.used_at is not None:
        return None

    if as_utc(reset.expires_at) < utc_now():
        return None

    return reset


def mark_token_used(db: Session, reset: PasswordResetToken) -> None:
    """Mark a reset token as used."""
    reset.used_at = utc_now()
    db.flush()
