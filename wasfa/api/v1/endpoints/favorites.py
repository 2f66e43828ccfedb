# wasfa/api/v1/endpoints/favorites.py
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.schemas.favorite import FavoriteMedicationCreate, FavoriteMedicationResponse
from wasfa.services import favorite_service
from wasfa.services.errors import NotFoundError

router = APIRouter()


@router.get("", response_model=list[FavoriteMedicationResponse])
def list_favorites(
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[FavoriteMedicationResponse]:
    return favorite_service.list_favorites(db, tenant_id=ctx.tenant.id)


@router.get("/match", response_model=list[FavoriteMedicationResponse])
def match_favorites(
    q: Optional[str] = Query(None, description="In-progress medication name"),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> list[FavoriteMedicationResponse]:
    """
    Autocomplete: favorites whose name contains q (case-insensitive).
    """
    return favorite_service.search_favorites(db, tenant_id=ctx.tenant.id, query=q)


@router.post("", response_model=FavoriteMedicationResponse, status_code=status.HTTP_201_CREATED)
def create_favorite(
    payload: FavoriteMedicationCreate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> FavoriteMedicationResponse:
    return favorite_service.create_favorite(db, ctx, payload)


@router.delete("/{favorite_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_favorite(
    favorite_id: UUID,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> Response:
    try:
        favorite_service.delete_favorite(db, tenant_id=ctx.tenant.id, favorite_id=favorite_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
