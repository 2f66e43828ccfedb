# wasfa/utils/file_storage.py
import mimetypes
from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path, PurePosixPath
from uuid import UUID

from PIL import Image, UnidentifiedImageError

from wasfa.core.config import get_settings
from wasfa.services.errors import PermissionDeniedError, ValidationError

settings = get_settings()

SIGNATURES = "signatures"
LOGOS = "logos"
ASSET_KINDS = {SIGNATURES, LOGOS}

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "webp", "gif"}


def get_storage_root() -> Path:
    """
    Returns the absolute path to the file storage root directory.

    By default, this is "<cwd>/uploads", but it can be overridden
    via FILE_STORAGE_ROOT.
    """
    root = Path(settings.file_storage_root)
    if not root.is_absolute():
        root = Path.cwd() / root
    root.mkdir(parents=True, exist_ok=True)
    return root


def _extension(filename: str | None) -> str:
    return PurePosixPath(filename or "").suffix.lstrip(".").lower()


def validate_image(filename: str | None, data: bytes) -> str:
    """
    Check an uploaded image and return its normalized extension.

    The extension must be allowed and the content must decode as an image
    of an allowed format.
    """
    ext = _extension(filename)
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(
            f"Unsupported file type. Allowed: {', '.join(sorted(ALLOWED_IMAGE_EXTENSIONS))}"
        )
    if not data:
        raise ValidationError("Uploaded file is empty")
    if len(data) > settings.max_upload_bytes:
        raise ValidationError(f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB")

    try:
        with Image.open(BytesIO(data)) as image:
            image.verify()
            image_format = (image.format or "").lower()
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as exc:
        raise ValidationError("Uploaded file is not a valid image") from exc
    if image_format not in ALLOWED_IMAGE_EXTENSIONS:
        raise ValidationError(f"Unsupported image format: {image_format or 'unknown'}")
    return ext



def save_tenant_asset(tenant_id: UUID, kind: str, filename: str | None, data: bytes) -> str:
    """
    Save an image under "{tenant_id}/{kind}/{timestamp}.{ext}".

    Returns the relative storage path, which is what gets persisted.
    """
    if kind not in ASSET_KINDS:
        raise ValueError(f"Unknown asset kind: {kind}")
    ext = validate_image(filename, data)

    timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
    rel_path = f"{tenant_id}/{kind}/{timestamp}.{ext}"

    full_path = resolve_storage_path(rel_path)
    full_path.parent.mkdir(parents=True, exist_ok=True)
    with open(full_path, "wb") as f:
        f.write(data)
    return rel_path


def ensure_tenant_path(storage_path: str, tenant_id: UUID) -> str:
    """
    Refuse paths outside the tenant's own folder.
    """
    parts = PurePosixPath(storage_path.strip().lstrip("/")).parts
    if len(parts) < 2 or parts[0] != str(tenant_id) or ".." in parts:
        raise PermissionDeniedError("Path is outside the tenant folder")
    return "/".join(parts)


def resolve_storage_path(storage_path: str) -> Path:
    """
    Convert a relative storage path (stored in DB) into an absolute filesystem path.
    """
    storage_root = get_storage_root().resolve()
    full_path = (storage_root / storage_path).resolve()
    if storage_root not in full_path.parents:
        raise PermissionDeniedError("Path escapes the storage root")
    return full_path


def read_storage_file(storage_path: str) -> bytes:
    full_path = resolve_storage_path(storage_path)
    if not full_path.is_file():
        raise FileNotFoundError(storage_path)
    return full_path.read_bytes()


def guess_media_type(storage_path: str) -> str:
    return mimetypes.guess_type(storage_path)[0] or "application/octet-stream"
