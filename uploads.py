"""
Custom design uploads.

Files are written under a publicly served directory with a generated name
(custom_<millis>_<random><ext>). Nothing here touches orders; callers attach
the returned public path to an order themselves.
"""

import logging
import os
import secrets
import string
import time
from dataclasses import dataclass
from typing import Optional

from config import MAX_UPLOAD_BYTES
from errors import RepositoryError, ValidationError

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/customDesigns"
FILENAME_PREFIX = "custom_"

ALLOWED_EXTENSIONS = {
    "image/jpeg": (".jpg", ".jpeg"),
    "image/png": (".png",),
    "image/svg+xml": (".svg",),
    "application/postscript": (".ai", ".eps", ".ps"),
    "image/vnd.adobe.photoshop": (".psd",),
}
ALLOWED_TYPES = frozenset(ALLOWED_EXTENSIONS)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass(frozen=True)
class StoredUpload:
    filename: str
    filepath: str


def check_upload(size: int, content_type: str, max_bytes: int = MAX_UPLOAD_BYTES,
                 original_name: Optional[str] = None) -> None:
    if size > max_bytes:
        raise ValidationError(f"File size must be at most {max_bytes // (1024 * 1024)}MB")
    if content_type not in ALLOWED_TYPES:
        raise ValidationError("Invalid file type")
    if original_name is not None:
        _, ext = os.path.splitext(os.path.basename(original_name))
        if ext.lower() not in ALLOWED_EXTENSIONS[content_type]:
            raise ValidationError("File extension does not match file type")


def generate_filename(original_name: str) -> str:
    _, ext = os.path.splitext(os.path.basename(original_name or ""))
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(13))
    return f"{FILENAME_PREFIX}{int(time.time() * 1000)}_{suffix}{ext}"


def save_upload(
    original_name: str,
    content_type: str,
    data: bytes,
    upload_dir: str,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> StoredUpload:
    check_upload(len(data), content_type, max_bytes, original_name=original_name)

    filename = generate_filename(original_name)
    try:
        os.makedirs(upload_dir, exist_ok=True)
        with open(os.path.join(upload_dir, filename), "wb") as fh:
            fh.write(data)
    except OSError as e:
        logger.exception("Upload write failed for %s", filename)
        raise RepositoryError(f"Failed to upload file: {e}") from e

    logger.info("Stored custom design %s (%d bytes)", filename, len(data))
    return StoredUpload(filename=filename, filepath=f"{PUBLIC_PREFIX}/{filename}")
