from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from wasfa.core.config import get_settings

settings = get_settings()

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ALGORITHM = "HS256"

# Distinguishes storage tokens from access tokens signed with the same key.
STORAGE_TOKEN_TYPE = "storage"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    subject: str,
    tenant_id: str | None,
    roles: list[str],
    expires_delta_minutes: int | None = None,
) -> str:
    """
    Create a JWT access token with subject (user id), tenant_id and roles.

    The roles claim is informational only; authorization always re-reads
    the role rows so a role change takes effect on the next request.
    """
    if expires_delta_minutes is None:
        expires_delta_minutes = settings.access_token_expire_minutes

    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_delta_minutes)
    to_encode: dict[str, Any] = {
        "sub": str(subject),
        "tenant_id": tenant_id,
        "roles": roles,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.
    Raises ValueError with descriptive message if token is invalid or expired.
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise ValueError("Token has expired. Please log in again.") from None
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    return payload


def create_storage_token(path: str, expires_in_seconds: int) -> str:
    """
    Sign a storage path into a short-lived token used in signed file URLs.
    """
    expire = datetime.now(timezone.utc) + timedelta(seconds=expires_in_seconds)
    to_encode = {"path": path, "typ": STORAGE_TOKEN_TYPE, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_storage_token(token: str) -> str:
    """
    Return the storage path signed into token.
    Raises ValueError if the token is invalid, expired or not a storage token.
    """
    payload = decode_token(token)
    if payload.get("typ") != STORAGE_TOKEN_TYPE or not payload.get("path"):
        raise ValueError("Invalid token")
    return payload["path"]
