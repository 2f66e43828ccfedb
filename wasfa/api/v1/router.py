# wasfa/api/v1/router.py
from fastapi import APIRouter

from wasfa.api.v1.endpoints import (
    audit_logs,
    auth,
    dashboard,
    exports,
    favorites,
    patients,
    prescriptions,
    settings,
    templates,
    users,
)

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(settings.profile_router, prefix="/profile", tags=["profile"])
api_router.include_router(settings.clinic_router, prefix="/clinic", tags=["clinic"])
api_router.include_router(settings.storage_router, prefix="/storage", tags=["storage"])
api_router.include_router(patients.router, prefix="/patients", tags=["patients"])
api_router.include_router(prescriptions.router, prefix="/prescriptions", tags=["prescriptions"])
api_router.include_router(templates.router, prefix="/templates", tags=["templates"])
api_router.include_router(favorites.router, prefix="/favorites", tags=["favorites"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(audit_logs.router, prefix="/audit-logs", tags=["audit-logs"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(exports.router, prefix="/exports", tags=["exports"])
