"""
Tag Service

Normalizes comma-separated tag input, resolves tags by name or slug and
maintains the link tables between tags and classes/galleries.

None of these functions commit; the caller owns the transaction.
"""

import logging
import re

from sqlalchemy import Table, delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.models.tag import Tag

logger = logging.getLogger(__name__)


def normalize_tags(tag_string: str | None) -> list[str]:
    """
    Split a comma-separated tag string into clean names.

    Whitespace is trimmed, empty entries dropped and duplicates removed
    keeping first-occurrence order.

    Example:
        >>> normalize_tags("a, a, ,b")
        ['a', 'b']
    """
    if not tag_string or not tag_string.strip():
        return []

    names: list[str] = []
    for raw in tag_string.split(","):
        name = raw.strip()
        if name and name not in names:
            names.append(name)
    return names


def tag_slug(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.lower())
    slug = re.sub(r"[^\w-]", "", slug)
    return slug or name.lower()


def _content_column(link_table: Table):
    return next(column for column in link_table.c if column.name != "tag_id")


async def get_or_create_tag(db: AsyncSession, name: str) -> int:
    """
    Return the id of the tag called ``name``, creating it if needed.

    Lookup is by exact name first, then by slug so that ``Design`` and
    ``design`` resolve to the same row.
    """
    result = await db.execute(select(Tag.id).where(Tag.name == name))
    tag_id = result.scalar_one_or_none()
    if tag_id is not None:
        return tag_id

    slug = tag_slug(name)
    result = await db.execute(select(Tag.id).where(Tag.slug == slug).limit(1))
    tag_id = result.scalar_one_or_none()
    if tag_id is not None:
        return tag_id

    tag = Tag(name=name, slug=slug, usage_count=0)
    db.add(tag)
    await db.flush()

    logger.info(f"Tag created: id={tag.id}, name={name!r}, slug={slug!r}")
    return tag.id


async def link_tags(db: AsyncSession, link_table: Table, content_id: int, tag_ids: list[int]) -> None:
    """Insert link rows for ``tag_ids`` and bump each tag's usage count."""
    if not tag_ids:
        return

    content_column = _content_column(link_table)
    await db.execute(
        insert(link_table),
        [{content_column.name: content_id, "tag_id": tag_id} for tag_id in tag_ids],
    )
    await db.execute(
        update(Tag).where(Tag.id.in_(tag_ids)).values(usage_count=Tag.usage_count + 1)
    )
    logger.debug(f"Linked {len(tag_ids)} tag(s) to {link_table.name} content {content_id}")


async def unlink_all_tags(db: AsyncSession, link_table: Table, content_id: int) -> list[int]:
    """
    Remove every tag link of a content item.

    Returns:
        IDs of the tags that were unlinked
    """
    content_column = _content_column(link_table)

    result = await db.execute(select(link_table.c.tag_id).where(content_column == content_id))
    tag_ids = [row[0] for row in result.all()]
    if not tag_ids:
        return []

    await db.execute(delete(link_table).where(content_column == content_id))
    await db.execute(
        update(Tag)
        .where(Tag.id.in_(tag_ids), Tag.usage_count > 0)
        .values(usage_count=Tag.usage_count - 1)
    )
    logger.debug(f"Unlinked {len(tag_ids)} tag(s) from {link_table.name} content {content_id}")
    return tag_ids


async def process_tags(db: AsyncSession, link_table: Table, content_id: int, tag_string: str | None) -> list[int]:
    """Normalize ``tag_string``, resolve each name to a tag and link them."""
    names = normalize_tags(tag_string)
    if not names:
        return []

    tag_ids: list[int] = []
    for name in names:
        tag_id = await get_or_create_tag(db, name)
        # different names can share a slug and resolve to one tag
        if tag_id not in tag_ids:
            tag_ids.append(tag_id)

    await link_tags(db, link_table, content_id, tag_ids)
    return tag_ids
