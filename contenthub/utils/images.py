"""
Image Preparation

Validates uploaded images and re-encodes them to WebP before they are
written to object storage.
"""

import io
import logging
from pathlib import Path

from fastapi import UploadFile
from PIL import Image, UnidentifiedImageError
from starlette.concurrency import run_in_threadpool

from contenthub.config import settings
from contenthub.exceptions import InvalidFileTypeError, ValidationError

logger = logging.getLogger(__name__)

MAX_FILE_SIZE = settings.media_max_file_size

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": [".jpg", ".jpeg"],
    "image/png": [".png"],
    "image/gif": [".gif"],
    "image/webp": [".webp"],
}


def validate_image(file: UploadFile) -> str:
    """
    Validate an uploaded image's MIME type and extension.

    Returns:
        The validated MIME type

    Raises:
        ValidationError: If no file was provided
        InvalidFileTypeError: If the file is not an accepted image
    """
    if not file.filename:
        raise ValidationError("No file provided", field="file")

    mime_type = file.content_type
    if not mime_type or mime_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidFileTypeError(mime_type, list(ALLOWED_IMAGE_TYPES.keys()))

    file_ext = Path(file.filename).suffix.lower()
    if file_ext and file_ext not in ALLOWED_IMAGE_TYPES[mime_type]:
        raise ValidationError(
            f"File extension {file_ext} does not match MIME type {mime_type}",
            field="file",
        )

    return mime_type


def convert_to_webp(
    data: bytes,
    max_dimension: int = settings.image_max_dimension,
    quality: int = settings.image_quality,
) -> bytes:
    """Downscale so neither side exceeds ``max_dimension`` and encode as WebP."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGBA" if "transparency" in img.info else "RGB")

            if img.width > max_dimension or img.height > max_dimension:
                img.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)

            output = io.BytesIO()
            img.save(output, format="WEBP", quality=quality)
            return output.getvalue()
    except (UnidentifiedImageError, OSError) as e:
        logger.warning("Failed to decode image: %s", e)
        raise ValidationError("Uploaded file is not a readable image", field="file") from e


async def prepare_image(file: UploadFile) -> bytes:
    """Validate an upload, read it and return WebP bytes ready for storage."""
    validate_image(file)

    data = await file.read()
    if not data:
        raise ValidationError("Uploaded file is empty", field="file")
    if len(data) > MAX_FILE_SIZE:
        raise ValidationError(
            f"File too large. Maximum size: {MAX_FILE_SIZE / 1024 / 1024}MB",
            field="file",
        )

    return await run_in_threadpool(convert_to_webp, data)


async def prepare_optional_image(file: UploadFile | None) -> bytes | None:
    if file is None or not file.filename:
        return None
    return await prepare_image(file)
