"""
Content Constants

Category vocabularies and defaults for each content type.
"""

CLASS_DEFAULT_CATEGORY = "design"

GALLERY_CATEGORIES = ("development", "design", "publishing")
GALLERY_DEFAULT_CATEGORY = "design"

NEWS_CATEGORIES = ("notice", "update", "news")
NEWS_DEFAULT_CATEGORY = "notice"


def normalize_category(value: str | None, allowed: tuple[str, ...] | None, default: str) -> str:
    """Return ``value`` trimmed, or ``default`` when empty or not in ``allowed``."""
    value = (value or "").strip()
    if not value:
        return default
    if allowed is not None and value not in allowed:
        return default
    return value
