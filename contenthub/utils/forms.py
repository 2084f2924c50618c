"""
Helpers for the admin multipart forms.
"""

from fastapi import UploadFile

from contenthub.exceptions import ValidationError
from contenthub.services.content_service import ContentUploads
from contenthub.utils.images import prepare_image, prepare_optional_image


def form_flag(value: str | None) -> bool:
    """Checkbox fields arrive as the literal string ``"true"`` when set."""
    return value == "true"


def require_fields(**fields: str | None) -> None:
    """Raise ValidationError naming the first blank required field."""
    for name, value in fields.items():
        if value is None or not value.strip():
            raise ValidationError(f"{name} is required", field=name)


def _present(files: list[UploadFile] | None) -> list[UploadFile]:
    return [file for file in files or [] if file is not None and file.filename]


async def collect_uploads(
    thumbnail: UploadFile | None = None,
    cover: UploadFile | None = None,
    content_images: list[UploadFile] | None = None,
    content_image_temp_ids: list[str] | None = None,
    gallery_images: list[UploadFile] | None = None,
    kept_image_urls: list[str] | None = None,
) -> ContentUploads:
    """
    Validate and re-encode every uploaded image of a form submission.

    Body images are paired with temp ids by position; a file without a
    matching id is kept with an empty id and skipped at upload time.
    """
    temp_ids = list(content_image_temp_ids or [])
    pairs = []
    for index, file in enumerate(content_images or []):
        if file is None or not file.filename:
            continue
        temp_id = temp_ids[index].strip() if index < len(temp_ids) else ""
        pairs.append((temp_id, await prepare_image(file)))

    return ContentUploads(
        thumbnail=await prepare_optional_image(thumbnail),
        cover=await prepare_optional_image(cover),
        content_images=pairs,
        gallery_images=[await prepare_image(file) for file in _present(gallery_images)],
        kept_image_urls=[url for url in kept_image_urls or [] if url],
    )
