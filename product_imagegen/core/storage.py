"""Local file storage for uploaded and generated images.

Handles the two append-only storage areas:
- uploads: caller-supplied images that passed validation
- generated: provider-returned images

Names are made unique with a millisecond timestamp plus a random suffix;
collisions are not otherwise guarded. Files are created with exclusive mode so
an unlikely collision surfaces as `StorageError` instead of an overwrite.
"""

import logging
import os
import random
import time

from product_imagegen.core.errors import StorageError


logger = logging.getLogger(__name__)

RANDOM_SUFFIX_MAX = 10**9


def unique_name(prefix: str, extension: str) -> str:
    """Build `<prefix>-<epochMillis>-<random 0..1e9>.<extension>`."""
    millis = int(time.time() * 1000)
    suffix = random.randint(0, RANDOM_SUFFIX_MAX)
    return f"{prefix}-{millis}-{suffix}.{extension.lstrip('.')}"


def ensure_directories(*directories: str) -> None:
    for directory in directories:
        os.makedirs(directory, exist_ok=True)


def write_file(directory: str, name: str, data: bytes) -> str:
    """Write `data` to `directory/name` and return the absolute path.

    Raises:
        StorageError: The directory cannot be created or the file cannot be written.
    """
    path = os.path.abspath(os.path.join(directory, name))
    try:
        os.makedirs(directory, exist_ok=True)
        with open(path, "xb") as f:
            f.write(data)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise StorageError(f"Failed to store file {name}") from e

    logger.info("Stored %s (%d bytes)", path, len(data))
    return path


def save_generated_image(directory: str, data: bytes, extension: str = "png") -> tuple[str, str]:
    """Persist provider-returned bytes as `generated-<ms>-<rand>.png`.

    Returns:
        `(file_name, absolute_path)`.
    """
    name = unique_name("generated", extension)
    return name, write_file(directory, name, data)
