# wasfa/api/v1/endpoints/users.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext
from wasfa.dependencies.authz import require_capability
from wasfa.schemas.user import InviteUserRequest, RoleUpdateRequest, TeamMemberResponse
from wasfa.services import user_service
from wasfa.services.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from wasfa.services.permission_service import MANAGE_CLINIC

router = APIRouter()


@router.get("", response_model=list[TeamMemberResponse])
def list_users(
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> list[TeamMemberResponse]:
    """
    Members of the caller's clinic with their roles.
    """
    return user_service.list_team_members(db, tenant_id=ctx.tenant.id)


@router.post("/invite", response_model=TeamMemberResponse, status_code=status.HTTP_201_CREATED)
def invite_user(
    payload: InviteUserRequest,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> TeamMemberResponse:
    try:
        return user_service.invite_member(db, ctx, payload)
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc


@router.patch("/{user_id}/role", response_model=TeamMemberResponse)
def update_user_role(
    user_id: UUID,
    payload: RoleUpdateRequest,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> TeamMemberResponse:
    try:
        return user_service.change_member_role(db, ctx, user_id, payload.role)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> Response:
    """
    Unlink the user from the clinic. The account itself is kept.
    """
    try:
        user_service.remove_member(db, ctx, user_id)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
