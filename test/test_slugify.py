"""
Tests for slug generation

Covers the slugify helper and collision handling in generate_unique_slug.
"""

import re

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from contenthub.models import ClassItem, Gallery
from contenthub.utils.slugify import generate_unique_slug, slugify


class TestSlugifyBasic:
    """Test basic slugify functionality"""

    def test_slugify_simple_string(self):
        assert slugify("Hello World") == "hello-world"

    def test_slugify_with_numbers(self):
        assert slugify("Lesson 12") == "lesson-12"

    def test_slugify_removes_special_characters(self):
        """Test that special characters are replaced with hyphens"""
        assert slugify("Hello@World!") == "hello-world"
        assert slugify("Grids & Gutters") == "grids-gutters"
        assert slugify("Price: $99.99") == "price-99-99"

    def test_slugify_multiple_spaces(self):
        assert slugify("Too   Many   Spaces") == "too-many-spaces"


class TestSlugifyUnicode:
    """Test slugify with unicode and international characters"""

    def test_slugify_accented_characters(self):
        assert slugify("Café") == "cafe"
        assert slugify("Résumé") == "resume"

    def test_slugify_german_umlauts(self):
        assert slugify("Größe") == "grosse"

    def test_slugify_korean_is_transliterated(self):
        result = slugify("디자인 기초")
        assert result
        assert re.fullmatch(r"[a-z0-9-]+", result)


class TestSlugifyEdgeCases:
    """Test edge cases and error handling"""

    def test_slugify_empty_string_raises_error(self):
        with pytest.raises(ValueError) as exc_info:
            slugify("")

        assert "non-empty" in str(exc_info.value).lower()

    def test_slugify_whitespace_raises_error(self):
        with pytest.raises(ValueError):
            slugify("   ")

    def test_slugify_only_special_characters(self):
        """Test slugifying string with only special characters"""
        assert slugify("@#$%^&*()") == "n-a"

    def test_slugify_leading_trailing_hyphens(self):
        assert slugify("-Hello World-") == "hello-world"
        assert slugify("---Test---") == "test"


class TestGenerateUniqueSlug:
    """Test collision handling against existing rows"""

    async def test_free_slug_is_used_as_is(self, test_db: AsyncSession):
        assert await generate_unique_slug(test_db, ClassItem, "Color Theory") == "color-theory"

    async def test_collision_appends_timestamp(self, test_db: AsyncSession):
        test_db.add(ClassItem(title="Color Theory", slug="color-theory", category="design", content_mdx=""))
        await test_db.commit()

        slug = await generate_unique_slug(test_db, ClassItem, "Color Theory")

        assert slug != "color-theory"
        assert re.fullmatch(r"color-theory-\d{13}", slug)

    async def test_slugs_are_checked_per_model(self, test_db: AsyncSession):
        test_db.add(ClassItem(title="Spring", slug="spring", category="design", content_mdx=""))
        await test_db.commit()

        assert await generate_unique_slug(test_db, Gallery, "Spring") == "spring"
