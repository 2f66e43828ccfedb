# wasfa/services/auth_service.py
import logging
from datetime import timedelta

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from wasfa.core.config import get_settings
from wasfa.core.security import create_access_token, get_password_hash, verify_password
from wasfa.models.profile import Profile
from wasfa.models.tenant import SubscriptionStatus, Tenant
from wasfa.models.user import User
from wasfa.models.user_role import RoleName, UserRole
from wasfa.notifications.email.base import send_email_safely
from wasfa.schemas.auth import LoginRequest, SignupRequest
from wasfa.services.errors import ConflictError, ValidationError
from wasfa.services.user_role_service import get_user_roles
from wasfa.utils.datetime_utils import utc_now
from wasfa.utils.email_templates import render_password_reset_email
from wasfa.utils.token_utils import (
    create_password_reset_token,
    mark_token_used,
    verify_password_reset_token,
)

logger = logging.getLogger(__name__)

settings = get_settings()


class AuthenticationError(Exception):
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def authenticate_user(db: Session, login_data: LoginRequest) -> User:
    """
    Authenticate a user given email and password.
    """
    user = get_user_by_email(db, login_data.email)
    if not user:
        raise AuthenticationError("Invalid email or password")

    if not verify_password(login_data.password, user.hashed_password):
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        raise AuthenticationError("Account is disabled")

    return user


def issue_access_token_for_user(db: Session, user: User) -> str:
    profile = db.get(Profile, user.id)
    tenant_id = str(profile.tenant_id) if profile and profile.tenant_id else None
    roles = [role.value for role in get_user_roles(db, user.id)]
    return create_access_token(
        subject=str(user.id),
        tenant_id=tenant_id,
        roles=roles,
    )


def signup_clinic(db: Session, payload: SignupRequest) -> User:
    """
    Register a clinic: identity, tenant in trial, profile and clinic_admin role.

    Everything is written in one transaction.
    """
    email = normalize_email(payload.email)
    if get_user_by_email(db, email):
        raise ConflictError("A user with this email already exists")

    try:
        user = User(email=email, hashed_password=get_password_hash(payload.password), is_active=True)
        tenant = Tenant(
            name=payload.clinic_name.strip(),
            subscription_status=SubscriptionStatus.TRIAL,
            trial_ends_at=utc_now() + timedelta(days=settings.trial_days),
        )
        db.add_all([user, tenant])
        db.flush()

        db.add(Profile(id=user.id, tenant_id=tenant.id, full_name=payload.full_name.strip()))
        db.add(UserRole(user_id=user.id, role=RoleName.CLINIC_ADMIN))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A user with this email already exists") from exc
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("Clinic %s registered by %s (trial ends %s)", tenant.id, email, tenant.trial_ends_at)
    return user


def request_password_reset(db: Session, email: str) -> None:
    """
    Create a reset token and email the link. Unknown addresses are ignored
    silently so callers cannot tell which accounts exist.
    """
    user = get_user_by_email(db, email)
    if not user or not user.is_active:
        logger.info("Password reset requested for unknown or inactive address")
        return

    try:
        token = create_password_reset_token(
            db, user.id, expires_in_hours=settings.password_reset_expire_hours
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    profile = db.get(Profile, user.id)
    reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password?token={token}"
    subject, html = render_password_reset_email(
        full_name=profile.full_name if profile else user.email,
        reset_url=reset_url,
        expires_in_hours=settings.password_reset_expire_hours,
    )
    send_email_safely(user.email, subject, html, reason="password-reset", html=True)


def reset_password(db: Session, token: str, new_password: str) -> User:
    reset = verify_password_reset_token(db, token)
    if not reset:
        raise ValidationError("Invalid or expired reset token")

    user = db.get(User, reset.user_id)
    if not user:
        raise ValidationError("Invalid or expired reset token")

    try:
        user.hashed_password = get_password_hash(new_password)
        mark_token_used(db, reset)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Password reset completed for user %s", user.id)
    return user


def change_password(db: Session, user: User, old_password: str, new_password: str) -> None:
    if not verify_password(old_password, user.hashed_password):
        raise ValidationError("Current password is incorrect")

    try:
        user.hashed_password = get_password_hash(new_password)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
