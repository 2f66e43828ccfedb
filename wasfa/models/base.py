# wasfa/models/base.py
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Base class for all ORM models.

    Tenant-owned tables carry an explicit tenant_id column; isolation is
    enforced by the service layer filtering on it.
    """

    pass
