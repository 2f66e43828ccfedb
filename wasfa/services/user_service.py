# wasfa/services/user_service.py
"""
Clinic team management: listing members, inviting, changing roles, unlinking.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from wasfa.core.security import get_password_hash
from wasfa.core.tenant_context import TenantContext
from wasfa.models.audit_log import AuditAction, AuditEntityType
from wasfa.models.profile import Profile
from wasfa.models.user import User
from wasfa.models.user_role import RoleName, UserRole
from wasfa.schemas.user import InviteUserRequest, TeamMemberResponse
from wasfa.services import audit_service
from wasfa.services.auth_service import get_user_by_email, normalize_email
from wasfa.services.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from wasfa.services.permission_service import primary_role
from wasfa.services.user_role_service import delete_user_roles, get_user_roles, replace_user_role

logger = logging.getLogger(__name__)


def _member_response(db: Session, profile: Profile) -> TeamMemberResponse:
    roles = get_user_roles(db, profile.id)
    return TeamMemberResponse(
        id=profile.id,
        email=profile.user.email,
        full_name=profile.full_name,
        specialty=profile.specialty,
        roles=roles,
        role=primary_role(roles),
    )


def _check_grantable(ctx: TenantContext, role: RoleName) -> None:
    if role == RoleName.SUPER_ADMIN and RoleName.SUPER_ADMIN not in ctx.roles:
        raise PermissionDeniedError("Only a super admin can grant the super_admin role")


def _check_manageable(ctx: TenantContext, target_roles: list[RoleName]) -> None:
    if RoleName.SUPER_ADMIN in target_roles and RoleName.SUPER_ADMIN not in ctx.roles:
        raise PermissionDeniedError("Only a super admin can change or remove a super admin")


def _get_member_profile(db: Session, tenant_id: UUID, user_id: UUID) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id, Profile.tenant_id == tenant_id).first()
    if not profile:
        raise NotFoundError("User not found in this clinic")
    return profile


def list_team_members(db: Session, *, tenant_id: UUID) -> list[TeamMemberResponse]:
    profiles = (
        db.query(Profile)
        .join(User, User.id == Profile.id)
        .filter(Profile.tenant_id == tenant_id)
        .order_by(Profile.created_at.asc())
        .all()
    )
    return [_member_response(db, p) for p in profiles]


def invite_member(db: Session, ctx: TenantContext, payload: InviteUserRequest) -> TeamMemberResponse:
    """
    Create identity, clinic-linked profile and role as one unit of work.
    If any step fails nothing is kept.
    """
    _check_grantable(ctx, payload.role)

    email = normalize_email(payload.email)
    if get_user_by_email(db, email):
        raise ConflictError("A user with this email already exists")

    try:
        user = User(email=email, hashed_password=get_password_hash(payload.password), is_active=True)
        db.add(user)
        db.flush()

        profile = Profile(id=user.id, tenant_id=ctx.tenant.id, full_name=payload.full_name.strip())
        db.add(profile)
        db.add(UserRole(user_id=user.id, role=payload.role))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("A user with this email already exists") from exc
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("User %s invited to tenant %s as %s", user.id, ctx.tenant.id, payload.role.value)
    audit_service.record(
        db,
        ctx,
        AuditAction.CREATE,
        AuditEntityType.USER,
        entity_id=user.id,
        entity_name=profile.full_name,
        new_data={"email": email, "full_name": profile.full_name, "role": payload.role.value},
    )
    return _member_response(db, profile)


def change_member_role(db: Session, ctx: TenantContext, user_id: UUID, role: RoleName) -> TeamMemberResponse:
    """
    Replace every role row of a member with the single given role.
    """
    if user_id == ctx.user.id:
        raise ValidationError("You cannot change your own role")
    _check_grantable(ctx, role)

    profile = _get_member_profile(db, ctx.tenant.id, user_id)
    current_roles = get_user_roles(db, user_id)
    _check_manageable(ctx, current_roles)
    old_roles = [r.value for r in current_roles]

    try:
        replace_user_role(db, user_id, role)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    audit_service.record(
        db,
        ctx,
        AuditAction.UPDATE,
        AuditEntityType.USER,
        entity_id=user_id,
        entity_name=profile.full_name,
        old_data={"roles": old_roles},
        new_data={"roles": [role.value]},
    )
    return _member_response(db, profile)


def remove_member(db: Session, ctx: TenantContext, user_id: UUID) -> None:
    """
    Unlink a member from the clinic: tenant_id cleared and role rows removed.
    The identity itself is kept.
    """
    if user_id == ctx.user.id:
        raise ValidationError("You cannot remove yourself from the clinic")

    profile = _get_member_profile(db, ctx.tenant.id, user_id)
    current_roles = get_user_roles(db, user_id)
    _check_manageable(ctx, current_roles)
    old_roles = [r.value for r in current_roles]

    try:
        profile.tenant_id = None
        delete_user_roles(db, user_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("User %s removed from tenant %s", user_id, ctx.tenant.id)
    audit_service.record(
        db,
        ctx,
        AuditAction.DELETE,
        AuditEntityType.USER,
        entity_id=user_id,
        entity_name=profile.full_name,
        old_data={"roles": old_roles},
    )
