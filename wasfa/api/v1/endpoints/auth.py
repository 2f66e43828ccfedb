import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.security import OAuth2PasswordBearer, OAuth2PasswordRequestForm
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from wasfa.core.config import get_settings
from wasfa.core.database import get_db
from wasfa.core.security import decode_token
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.user import User
from wasfa.schemas.auth import (
    ChangePasswordRequest,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
    TokenResponse,
)
from wasfa.schemas.profile import CurrentUserResponse, ProfileResponse, TenantResponse
from wasfa.services.audit_service import log_audit_event
from wasfa.services.auth_service import (
    AuthenticationError,
    authenticate_user,
    change_password,
    issue_access_token_for_user,
    request_password_reset,
    reset_password,
    signup_clinic,
)
from wasfa.services.errors import ConflictError, ValidationError
from wasfa.services.identity_service import ResolvedIdentity, resolve_identity
from wasfa.services.subscription_service import get_tenant_subscription

logger = logging.getLogger(__name__)

router = APIRouter()

settings = get_settings()

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/login")


def _record_session_event(db: Session, identity: ResolvedIdentity, action: AuditAction) -> None:
    # Unassigned principals have no tenant log to write to.
    if identity.tenant is None:
        return
    log_audit_event(
        db,
        tenant_id=identity.tenant.id,
        user_id=identity.user.id,
        user_name=identity.display_name,
        action=action,
        entity_type=AuditEntityType.USER,
        entity_id=identity.user.id,
        entity_name=identity.display_name,
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED, tags=["auth"])
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """
    Register a new clinic. The caller becomes its clinic admin and the clinic
    starts in trial.
    """
    try:
        user = signup_clinic(db, payload)
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc

    return TokenResponse(access_token=issue_access_token_for_user(db, user))


@router.post("/login", response_model=TokenResponse, tags=["auth"])
def login(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> TokenResponse:
    """
    OAuth2-style login: username is the email address.
    """
    try:
        login_data = LoginRequest(email=form_data.username, password=form_data.password)
        user = authenticate_user(db, login_data)
    except (AuthenticationError, PydanticValidationError) as exc:
        logger.info("Failed login attempt for %s", form_data.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password" if isinstance(exc, PydanticValidationError) else str(exc),
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    _record_session_event(db, resolve_identity(db, user.id), AuditAction.LOGIN)
    return TokenResponse(access_token=issue_access_token_for_user(db, user))


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Dependency to retrieve the current user from a JWT bearer token.
    """
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        user_id = UUID(payload.get("sub") or "")
    except ValueError:
        raise credentials_error from None

    user = db.get(User, user_id)
    if not user or not user.is_active:
        raise credentials_error

    return user


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, tags=["auth"])
def logout(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Response:
    """
    Tokens are stateless; the client discards its token. Only the audit
    entry is written here.
    """
    _record_session_event(db, resolve_identity(db, current_user.id), AuditAction.LOGOUT)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/forgot-password", status_code=status.HTTP_202_ACCEPTED, tags=["auth"])
def forgot_password(payload: ForgotPasswordRequest, db: Session = Depends(get_db)) -> dict:
    """
    Always accepted, whether or not the address belongs to an account.
    """
    request_password_reset(db, payload.email)
    return {"detail": "If the address is registered, a reset link has been sent"}


@router.post("/reset-password", tags=["auth"])
def reset_password_endpoint(payload: ResetPasswordRequest, db: Session = Depends(get_db)) -> dict:
    try:
        reset_password(db, payload.token, payload.new_password)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {"detail": "Password updated"}


@router.post("/change-password", tags=["auth"])
def change_password_endpoint(
    payload: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> dict:
    try:
        change_password(db, current_user, payload.old_password, payload.new_password)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return {"detail": "Password updated"}


@router.get("/me", response_model=CurrentUserResponse, tags=["auth"])
def read_current_user(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CurrentUserResponse:
    """
    The resolved identity: profile, clinic, roles and capability flags.
    A principal without roles gets every flag false instead of an error.
    """
    identity = resolve_identity(db, current_user.id)
    tenant = identity.tenant
    return CurrentUserResponse(
        id=current_user.id,
        email=current_user.email,
        profile=ProfileResponse.model_validate(identity.profile) if identity.profile else None,
        tenant=TenantResponse.model_validate(tenant) if tenant else None,
        roles=identity.roles,
        role=identity.primary_role,
        capabilities=identity.capabilities,
        subscription=get_tenant_subscription(tenant) if tenant else None,
    )
