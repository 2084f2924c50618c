"""
Body Image Handling

The admin editor inserts ``TEMP_IMAGE_<tempId>`` placeholders for images
that have not been uploaded yet. These helpers upload the matching files,
swap the placeholders for public URLs and, on edit, work out which
previously uploaded images the body no longer references.
"""

import logging
import re
import uuid

from contenthub.utils.storage import ObjectStorage

logger = logging.getLogger(__name__)

TEMP_IMAGE_PREFIX = "TEMP_IMAGE_"

MARKDOWN_IMAGE_RE = re.compile(r"!\[[^\]]*\]\s*\(\s*([^)\s]+)\s*\)")
# <img src=...> and MDX components such as <Figure src="..." />
TAG_SRC_RE = re.compile(r"""<[A-Za-z][\w.]*\s[^>]*?\bsrc\s*=\s*["']([^"']+)["']""", re.IGNORECASE)


def _is_owned_content_image(url: str, bucket: str, content_id: int | str) -> bool:
    return f"/{bucket}/{content_id}/content/" in url and url.endswith(".webp")


def _is_owned_path(path: str | None, content_id: int | str) -> bool:
    return bool(path) and path.startswith(f"{content_id}/")


async def upload_temp_images(
    storage: ObjectStorage,
    bucket: str,
    content_id: int,
    images: list[tuple[str, bytes]],
    uploaded_paths: list[str] | None = None,
) -> tuple[dict[str, str], list[str]]:
    """
    Upload ``(temp_id, data)`` pairs to ``{content_id}/content/{uuid}.webp``.

    Each path is appended to ``uploaded_paths`` as soon as its upload
    succeeds, so a caller can clean up after a failure part-way through.

    Returns:
        Tuple of (temp_id -> public URL, uploaded storage paths)
    """
    url_map: dict[str, str] = {}
    if uploaded_paths is None:
        uploaded_paths = []

    for index, (temp_id, data) in enumerate(images):
        if not temp_id:
            logger.warning(f"Skipping content image without temp id (index {index})")
            continue

        path = f"{content_id}/content/{uuid.uuid4()}.webp"
        url_map[temp_id] = await storage.upload(bucket, path, data)
        uploaded_paths.append(path)

    return url_map, uploaded_paths


def replace_temp_images(body: str | None, url_map: dict[str, str], strip_markdown: bool = False) -> str | None:
    """
    Replace every ``TEMP_IMAGE_<id>`` token in ``body`` with its URL.

    With ``strip_markdown`` an image wrapper ``![alt](TEMP_IMAGE_<id>)``
    collapses to the bare URL, for fields that feed component props.
    """
    if not body or not url_map:
        return body

    for temp_id, public_url in url_map.items():
        token = re.escape(f"{TEMP_IMAGE_PREFIX}{temp_id}")
        if strip_markdown:
            body = re.sub(rf"!\[[^\]]*\]\({token}\)", lambda _: public_url, body)
        body = re.sub(token, lambda _: public_url, body)

    return body


async def upload_content_images(
    storage: ObjectStorage,
    bucket: str,
    content_id: int,
    body: str,
    images: list[tuple[str, bytes]],
    uploaded_paths: list[str] | None = None,
) -> tuple[str, list[str]]:
    """
    Upload body images and substitute their placeholders.

    Returns:
        Tuple of (rewritten body, uploaded storage paths)
    """
    if uploaded_paths is None:
        uploaded_paths = []
    if not images:
        return body, uploaded_paths

    url_map, uploaded_paths = await upload_temp_images(storage, bucket, content_id, images, uploaded_paths)
    return replace_temp_images(body, url_map), uploaded_paths


def extract_owned_image_urls(body: str | None, bucket: str, content_id: int | str) -> list[str]:
    """
    Collect image URLs in ``body`` that point at this item's uploaded
    content images. Markdown images come first, then ``src`` attributes of tags;
    duplicates are dropped.
    """
    if not body or not body.strip() or not content_id:
        return []

    urls: list[str] = []
    for pattern in (MARKDOWN_IMAGE_RE, TAG_SRC_RE):
        for match in pattern.finditer(body):
            url = match.group(1).strip()
            if _is_owned_content_image(url, bucket, content_id) and url not in urls:
                urls.append(url)
    return urls


def diff_images(old_urls: list[str], new_urls: list[str]) -> tuple[list[str], list[str]]:
    """
    Compare image URL lists before and after an edit.

    Returns:
        Tuple of (removed, kept), both in ``old_urls`` order
    """
    new_set = set(new_urls)
    removed = [url for url in old_urls if url not in new_set]
    kept = [url for url in old_urls if url in new_set]
    return removed, kept


def owned_paths(storage: ObjectStorage, bucket: str, content_id: int, urls: list[str]) -> list[str]:
    """Map URLs to storage paths, keeping only paths under ``{content_id}/``."""
    paths = []
    for url in urls:
        path = storage.path_from_public_url(bucket, url)
        if not _is_owned_path(path, content_id):
            logger.warning(f"Refusing to delete {url!r}: not under {bucket}/{content_id}/")
            continue
        paths.append(path)
    return paths


async def delete_removed_images(
    storage: ObjectStorage,
    bucket: str,
    content_id: int,
    urls: list[str],
) -> list[str]:
    """Delete the storage objects behind ``urls`` that belong to this item."""
    if not urls:
        return []

    paths = owned_paths(storage, bucket, content_id, urls)
    if paths:
        await storage.remove(bucket, paths)
        logger.info(f"Removed {len(paths)} unreferenced image(s) from {bucket}/{content_id}/")
    return paths


async def upload_gallery_images(
    storage: ObjectStorage,
    bucket: str,
    gallery_id: int,
    images: list[bytes],
    uploaded_paths: list[str] | None = None,
) -> tuple[list[str], list[str]]:
    """
    Upload gallery images to ``{gallery_id}/images/{uuid}.webp``.

    Returns:
        Tuple of (public URLs, uploaded storage paths)
    """
    urls: list[str] = []
    if uploaded_paths is None:
        uploaded_paths = []
    for data in images:
        path = f"{gallery_id}/images/{uuid.uuid4()}.webp"
        urls.append(await storage.upload(bucket, path, data))
        uploaded_paths.append(path)
    return urls, uploaded_paths
