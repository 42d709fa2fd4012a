"""
utils/file_storage.py

Stores unit images on local disk under UPLOAD_DIR, served by the static
``/uploads`` mount. Images arrive inside JSON bodies either as base64 data
URLs (new uploads) or as previously returned ``/uploads/...`` paths.
"""

import base64
import binascii
import logging
import re
import uuid
from pathlib import Path
from typing import Iterable, List

from mayspace.core.config import settings
from mayspace.core.errors import ValidationError

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w/+.-]+);base64,(?P<data>.+)$", re.DOTALL)

_CONTENT_TYPE_TO_EXT = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


def upload_root() -> Path:
    return Path(settings.UPLOAD_DIR)


def ensure_upload_dir() -> Path:
    root = upload_root()
    root.mkdir(parents=True, exist_ok=True)
    return root


def is_data_url(value: str) -> bool:
    return value.startswith("data:")


def save_data_url(value: str) -> str:
    """
    Decode a base64 data URL, write it to disk and return its public path.

    Raises ValidationError on an unsupported type, bad encoding or oversized file.
    """
    match = _DATA_URL_RE.match(value)
    if not match:
        raise ValidationError("Image must be a base64 data URL")

    ext = _CONTENT_TYPE_TO_EXT.get(match.group("mime").lower())
    if not ext:
        raise ValidationError("Please upload a JPEG, PNG, WebP or GIF image.")

    try:
        contents = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("Image data is not valid base64")

    if len(contents) > settings.max_image_size_bytes:
        raise ValidationError(f"Image exceeds {settings.MAX_IMAGE_SIZE_MB}MB limit.")

    filename = f"images-{uuid.uuid4().hex}{ext}"
    (ensure_upload_dir() / filename).write_bytes(contents)
    return f"{settings.UPLOAD_URL_PREFIX}/{filename}"


def store_images(images: Iterable[str], owned: Iterable[str] = ()) -> List[str]:
    """
    Persist new uploads and keep existing references, preserving order.

    Only paths listed in ``owned`` (the unit's current images) may be kept;
    any other non-data-URL entry is rejected before anything is written.
    """
    images = [img for img in images if img]
    if len(images) > settings.MAX_IMAGES_PER_UNIT:
        raise ValidationError(f"A unit can have at most {settings.MAX_IMAGES_PER_UNIT} images")

    owned = set(owned)
    for image in images:
        if not is_data_url(image) and image not in owned:
            raise ValidationError("Images must be new uploads or images already on this unit")

    stored = []
    try:
        for image in images:
            stored.append(save_data_url(image) if is_data_url(image) else image)
    except ValidationError:
        delete_images(p for p in stored if p not in owned)
        raise
    return stored


def _local_path(image_path: str):
    """Map a public ``/uploads/<name>`` path to a file inside UPLOAD_DIR, or None."""
    prefix = settings.UPLOAD_URL_PREFIX.rstrip("/") + "/"
    if not image_path.startswith(prefix):
        return None
    root = upload_root().resolve()
    candidate = (root / image_path[len(prefix):]).resolve()
    if root not in candidate.parents:
        return None
    return candidate


def delete_image(image_path: str) -> bool:
    """
    Remove one stored image. Never raises: failures are logged and reported
    as False so callers can carry on with the database work.
    """
    file_path = _local_path(image_path)
    if file_path is None:
        logger.warning(f"[STORAGE] Skipping image outside upload dir: {image_path!r}")
        return False
    try:
        file_path.unlink()
        return True
    except OSError as e:
        logger.warning(f"[STORAGE] Could not delete image file {file_path}: {e}")
        return False


def delete_images(image_paths: Iterable[str]) -> int:
    """Best-effort removal of several images; returns how many were deleted."""
    return sum(1 for path in image_paths if delete_image(path))
