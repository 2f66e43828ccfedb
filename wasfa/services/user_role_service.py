"""
Reads and writes of user_roles rows.
"""

from uuid import UUID

from sqlalchemy.orm import Session

from wasfa.models.user_role import RoleName, UserRole


def get_user_roles(db: Session, user_id: UUID) -> list[RoleName]:
    """
    Return the roles held by user_id, in storage order.
    """
    rows = db.query(UserRole).filter(UserRole.user_id == user_id).all()
    return [RoleName(r.role) for r in rows]


def replace_user_role(db: Session, user_id: UUID, role: RoleName) -> None:
    """
    Replace every role row of user_id with a single row for role.
    Caller commits.
    """
    db.query(UserRole).filter(UserRole.user_id == user_id).delete(synchronize_session=False)
    db.add(UserRole(user_id=user_id, role=role))
    db.flush()


def delete_user_roles(db: Session, user_id: UUID) -> int:
    deleted = db.query(UserRole).filter(UserRole.user_id == user_id).delete(synchronize_session=False)
    db.flush()
    return deleted
