"""
Upload intake validation for the HTTP adapter.

Architectural role:
- Decide whether a caller-supplied file is an acceptable image.
- Persist accepted payloads under a collision-resistant storage name.
- Provide adapter-level intake only (no endpoint registration).

Processing lifecycle:
1. Check the lower-cased file extension against the allow-list.
2. Check the declared media type against the same allow-list pattern.
3. Check the payload size against the configured ceiling.
4. Only then write the payload into the upload area.

Error handling strategy:
- Every rejection raises `ValidationError` naming the violated constraint.
- Because validation precedes the write, a rejected upload never leaves a file.
- Write failures raise `StorageError`.

Determinism considerations:
- Validation is deterministic for fixed inputs and settings.
- Storage names depend on the wall clock and a random suffix.
"""

import logging
import os
import re

from product_imagegen.core.errors import ValidationError
from product_imagegen.core.generation_types import UploadedAsset
from product_imagegen.core.storage import unique_name, write_file
from product_imagegen.image.provider_config import ProviderSettings


logger = logging.getLogger(__name__)


# ============================================================
# VALIDATION
# ============================================================

def _media_type_pattern(allowed_types) -> re.Pattern:
    return re.compile("|".join(re.escape(t) for t in allowed_types))


def _extension(filename: str) -> str:
    _, ext = os.path.splitext(os.path.basename(filename or ""))
    return ext.lower().lstrip(".")


def validate_upload(
    filename: str,
    media_type: str,
    size: int,
    settings: ProviderSettings,
) -> str:
    """
    Validate declared upload metadata before anything is written.

    Validation behavior:
    - Rejects empty file names and extensions outside the allow-list,
      regardless of the declared media type.
    - Rejects media types that do not textually match the allow-list.
    - Rejects payloads larger than `settings.max_upload_bytes`.

    Returns:
        The lower-cased extension without the leading dot.
    """
    allowed = settings.allowed_image_types
    allowed_text = ", ".join(allowed)

    extension = _extension(filename)
    if not extension or extension not in allowed:
        raise ValidationError(
            f"Only image files are allowed! Unsupported file extension "
            f"'{extension or filename}'. Allowed: {allowed_text}"
        )

    if not media_type or not _media_type_pattern(allowed).search(media_type.lower()):
        raise ValidationError(
            f"Only image files are allowed! Unsupported media type "
            f"'{media_type}'. Allowed: {allowed_text}"
        )

    if size > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes / (1024 * 1024)
        raise ValidationError(f"File exceeds max size limit of {limit_mb:g} MB")

    return extension


# ============================================================
# PUBLIC ENTRYPOINT
# ============================================================

def store_upload(
    field_name: str,
    filename: str,
    media_type: str,
    payload: bytes,
    settings: ProviderSettings,
) -> UploadedAsset:
    """
    Validate and persist one uploaded image.

    Storage name format: `<field>-<epochMillis>-<random 0..1e9>.<ext>`.
    """
    extension = validate_upload(filename, media_type, len(payload), settings)

    storage_name = unique_name(field_name, extension)
    path = write_file(settings.upload_dir, storage_name, payload)

    logger.info("Accepted upload %r as %s", filename, storage_name)
    return UploadedAsset(
        storage_name=storage_name,
        absolute_path=path,
        size_bytes=len(payload),
        declared_media_type=media_type,
        original_filename=filename,
    )
