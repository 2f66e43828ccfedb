# wasfa/services/favorite_service.py
import logging
from typing import Iterable
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wasfa.core.tenant_context import TenantContext
from wasfa.models.favorite_medication import FavoriteMedication
from wasfa.schemas.favorite import FavoriteMedicationCreate
from wasfa.services.errors import NotFoundError

logger = logging.getLogger(__name__)


def match_favorites(favorites: Iterable[FavoriteMedication], query: str | None) -> list[FavoriteMedication]:
    """
    Case-insensitive substring match on medication_name.
    A blank query matches nothing.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [f for f in favorites if needle in (f.medication_name or "").lower()]


def list_favorites(db: Session, *, tenant_id: UUID) -> list[FavoriteMedication]:
    return (
        db.query(FavoriteMedication)
        .filter(FavoriteMedication.tenant_id == tenant_id)
        .order_by(FavoriteMedication.medication_name.asc())
        .all()
    )


def search_favorites(db: Session, *, tenant_id: UUID, query: str | None) -> list[FavoriteMedication]:
    return match_favorites(list_favorites(db, tenant_id=tenant_id), query)


def create_favorite(db: Session, ctx: TenantContext, payload: FavoriteMedicationCreate) -> FavoriteMedication:
    favorite = FavoriteMedication(
        **payload.model_dump(),
        tenant_id=ctx.tenant.id,
        created_by=ctx.user.id,
    )
    try:
        db.add(favorite)
        db.commit()
        db.refresh(favorite)
    except SQLAlchemyError:
        db.rollback()
        raise
    return favorite


def delete_favorite(db: Session, *, tenant_id: UUID, favorite_id: UUID) -> None:
    favorite = (
        db.query(FavoriteMedication)
        .filter(FavoriteMedication.id == favorite_id, FavoriteMedication.tenant_id == tenant_id)
        .first()
    )
    if not favorite:
        raise NotFoundError("Favorite medication not found")
    try:
        db.delete(favorite)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Favorite medication %s deleted in tenant %s", favorite_id, tenant_id)
