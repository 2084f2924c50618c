import re
import time

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from unidecode import unidecode


def slugify(text):
    if not text or not str(text).strip():
        raise ValueError("slugify() requires a non-empty string")
    text = unidecode(str(text)).lower()
    text = re.sub(r'[^a-z0-9]+', '-', text).strip('-')
    return text or "n-a"


async def generate_unique_slug(db: AsyncSession, model, title: str) -> str:
    """
    Derive a slug for ``title`` that no row of ``model`` holds yet.

    On collision the current timestamp (ms) is appended and the result
    re-slugified. The check and the later insert are not atomic; the
    unique index on ``slug`` is the final arbiter.
    """
    slug = slugify(title)

    result = await db.execute(select(model.id).where(model.slug == slug))
    if result.first() is not None:
        slug = slugify(f"{slug}-{int(time.time() * 1000)}")

    return slug
