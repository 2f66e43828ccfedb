# wasfa/api/v1/endpoints/settings.py
"""
Own profile, clinic settings, image uploads and signed file URLs.
"""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from wasfa.core.config import get_settings
from wasfa.core.database import get_db
from wasfa.core.tenant_context import TenantContext, get_tenant_context
from wasfa.dependencies.authz import require_capability
from wasfa.schemas.profile import (
    AssetUploadResponse,
    ProfileResponse,
    ProfileUpdate,
    SignedUrlResponse,
    TenantResponse,
    TenantUpdate,
)
from wasfa.services import profile_service
from wasfa.services.errors import NotFoundError, PermissionDeniedError, ValidationError
from wasfa.services.permission_service import MANAGE_CLINIC

logger = logging.getLogger(__name__)

settings = get_settings()

profile_router = APIRouter()
clinic_router = APIRouter()
storage_router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    # One byte past the limit is enough to know the file is too large.
    return await file.read(settings.max_upload_bytes + 1)


@profile_router.get("", response_model=ProfileResponse)
def read_profile(ctx: TenantContext = Depends(get_tenant_context)) -> ProfileResponse:
    return ctx.profile


@profile_router.patch("", response_model=ProfileResponse)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> ProfileResponse:
    return profile_service.update_profile(db, ctx, payload)


@profile_router.post("/signature", response_model=AssetUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_signature(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(get_tenant_context),
) -> AssetUploadResponse:
    data = await _read_upload(file)
    try:
        path = profile_service.upload_signature(db, ctx, file.filename, data)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AssetUploadResponse(path=path, signed_url=profile_service.create_signed_url(path))


@clinic_router.get("", response_model=TenantResponse)
def read_clinic(ctx: TenantContext = Depends(get_tenant_context)) -> TenantResponse:
    return ctx.tenant


@clinic_router.patch("", response_model=TenantResponse)
def update_clinic(
    payload: TenantUpdate,
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> TenantResponse:
    return profile_service.update_clinic(db, ctx, payload)


@clinic_router.post("/logo", response_model=AssetUploadResponse, status_code=status.HTTP_201_CREATED)
async def upload_logo(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    ctx: TenantContext = Depends(require_capability(MANAGE_CLINIC)),
) -> AssetUploadResponse:
    data = await _read_upload(file)
    try:
        path = profile_service.upload_logo(db, ctx, file.filename, data)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return AssetUploadResponse(path=path, signed_url=profile_service.create_signed_url(path))


@storage_router.get("/signed-url", response_model=SignedUrlResponse)
def get_signed_url(
    path: str = Query(..., description="Storage path inside the clinic folder"),
    ctx: TenantContext = Depends(get_tenant_context),
) -> SignedUrlResponse:
    try:
        signed_url = profile_service.sign_tenant_path(ctx, path)
    except PermissionDeniedError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return SignedUrlResponse(signed_url=signed_url, expires_in=settings.signed_url_expire_seconds)


@storage_router.get("/files/{token}")
def read_signed_file(token: str) -> Response:
    """
    Serve a stored file. The token is the only credential.
    """
    try:
        data, media_type = profile_service.read_signed_file(token)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except (NotFoundError, PermissionDeniedError) as exc:
        raise HTTPException(status_code=404, detail="File not found") from exc
    return Response(content=data, media_type=media_type)
