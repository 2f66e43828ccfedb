# wasfa/services/errors.py
"""
Domain exceptions raised by the service layer.

Endpoints translate them to HTTP errors; services never raise HTTPException.
"""


class ServiceError(Exception):
    pass


class NotFoundError(ServiceError):
    pass


class ValidationError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class PermissionDeniedError(ServiceError):
    pass


class NoTenantError(PermissionDeniedError):
    pass


class SubscriptionInactiveError(ServiceError):
    pass


class RenderError(ServiceError):
    pass
