"""
Tests for body image placeholders, ownership checks and image diffs
"""

import pytest

from contenthub.exceptions import StorageError
from contenthub.services.content_images import (
    delete_removed_images,
    diff_images,
    extract_owned_image_urls,
    owned_paths,
    replace_temp_images,
    upload_content_images,
    upload_gallery_images,
    upload_temp_images,
)
from utils.mocks import InMemoryStorage

BASE = "http://storage.test"


class TestReplaceTempImages:
    def test_every_occurrence_is_replaced(self):
        body = "![a](TEMP_IMAGE_x) and again ![b](TEMP_IMAGE_x)"
        result = replace_temp_images(body, {"x": "https://cdn/u.webp"})
        assert result == "![a](https://cdn/u.webp) and again ![b](https://cdn/u.webp)"

    def test_unknown_tokens_are_left_alone(self):
        body = "![a](TEMP_IMAGE_x) ![b](TEMP_IMAGE_y)"
        assert replace_temp_images(body, {"x": "U"}) == "![a](U) ![b](TEMP_IMAGE_y)"

    def test_ids_with_regex_characters(self):
        body = "![a](TEMP_IMAGE_a.b+c) ![b](TEMP_IMAGE_aXb+c)"
        assert replace_temp_images(body, {"a.b+c": "U"}) == "![a](U) ![b](TEMP_IMAGE_aXb+c)"

    def test_url_with_backslashes_is_inserted_literally(self):
        assert replace_temp_images("TEMP_IMAGE_x", {"x": r"https://cdn/\1.webp"}) == r"https://cdn/\1.webp"

    def test_strip_markdown_collapses_image_wrapper(self):
        body = '<Figure src="![cover](TEMP_IMAGE_x)" />'
        assert replace_temp_images(body, {"x": "U"}, strip_markdown=True) == '<Figure src="U" />'

    def test_empty_inputs(self):
        assert replace_temp_images(None, {"x": "U"}) is None
        assert replace_temp_images("", {"x": "U"}) == ""
        assert replace_temp_images("TEMP_IMAGE_x", {}) == "TEMP_IMAGE_x"


class TestUploadTempImages:
    async def test_uploads_under_content_folder(self):
        storage = InMemoryStorage(public_base_url=BASE)

        url_map, paths = await upload_temp_images(storage, "class", 4, [("x", b"1"), ("y", b"2")])

        assert set(url_map) == {"x", "y"}
        assert len(paths) == 2
        for path in paths:
            assert path.startswith("4/content/")
            assert path.endswith(".webp")
        assert url_map["x"].startswith(f"{BASE}/class/4/content/")

    async def test_images_without_temp_id_are_skipped(self):
        storage = InMemoryStorage()

        url_map, paths = await upload_temp_images(storage, "class", 4, [("", b"1"), ("y", b"2")])

        assert list(url_map) == ["y"]
        assert len(paths) == 1

    async def test_partial_failure_reports_uploaded_paths(self):
        storage = InMemoryStorage()
        calls = {"n": 0}

        def fail_second(path):
            calls["n"] += 1
            return calls["n"] == 2

        storage.fail_upload = fail_second
        uploaded: list[str] = []

        with pytest.raises(StorageError):
            await upload_temp_images(storage, "class", 4, [("x", b"1"), ("y", b"2")], uploaded)

        assert len(uploaded) == 1
        assert storage.paths("class") == uploaded

    async def test_upload_content_images_rewrites_body(self):
        storage = InMemoryStorage(public_base_url=BASE)

        body, paths = await upload_content_images(storage, "news", 2, "![hero](TEMP_IMAGE_t1)", [("t1", b"img")])

        assert "TEMP_IMAGE_" not in body
        assert body == f"![hero]({BASE}/news/{paths[0]})"

    async def test_upload_content_images_without_images(self):
        storage = InMemoryStorage()
        body, paths = await upload_content_images(storage, "news", 2, "text", [])
        assert (body, paths) == ("text", [])
        assert storage.upload_calls == []


class TestExtractOwnedImageUrls:
    def test_markdown_and_html_images(self):
        a = f"{BASE}/class/7/content/a.webp"
        b = f"{BASE}/class/7/content/b.webp"
        body = f'![a]({a})\n<img class="x" src="{b}" />\n![dup]({a})'

        assert extract_owned_image_urls(body, "class", 7) == [a, b]

    def test_component_src_attributes(self):
        a = f"{BASE}/gallery/3/content/a.webp"
        b = f"{BASE}/gallery/3/content/b.webp"
        body = f'<Figure src="{a}" caption="first" />\n<Figure\n  alt="second"\n  src=\'{b}\'\n/>'

        assert extract_owned_image_urls(body, "gallery", 3) == [a, b]

    def test_foreign_images_are_ignored(self):
        body = "\n".join(
            [
                f"![other item]({BASE}/class/8/content/a.webp)",
                f"![thumbnail]({BASE}/class/7/thumbnail.webp)",
                "![external](https://example.com/7/content/a.webp)",
                f"![other bucket]({BASE}/news/7/content/a.webp)",
                f"![png]({BASE}/class/7/content/a.png)",
            ]
        )
        assert extract_owned_image_urls(body, "class", 7) == []

    def test_empty_body(self):
        assert extract_owned_image_urls(None, "class", 7) == []
        assert extract_owned_image_urls("   ", "class", 7) == []


class TestDiffImages:
    def test_removed_and_kept(self):
        removed, kept = diff_images(["A", "B"], ["B", "C"])
        assert removed == ["A"]
        assert kept == ["B"]

    def test_nothing_before(self):
        assert diff_images([], ["A"]) == ([], [])

    def test_everything_removed(self):
        assert diff_images(["A", "B"], []) == (["A", "B"], [])


class TestDeleteRemovedImages:
    async def test_only_owned_paths_are_removed(self):
        storage = InMemoryStorage(public_base_url=BASE)
        own = storage.put("gallery", "3/images/a.webp")
        other = storage.put("gallery", "4/images/b.webp")

        paths = await delete_removed_images(storage, "gallery", 3, [own, other, "https://example.com/x.webp"])

        assert paths == ["3/images/a.webp"]
        assert storage.paths("gallery") == ["4/images/b.webp"]

    async def test_no_urls_means_no_calls(self):
        storage = InMemoryStorage()
        assert await delete_removed_images(storage, "gallery", 3, []) == []
        assert storage.remove_calls == []

    def test_owned_paths_does_not_match_id_prefix(self):
        storage = InMemoryStorage(public_base_url=BASE)
        assert owned_paths(storage, "class", 1, [f"{BASE}/class/12/content/a.webp"]) == []


class TestUploadGalleryImages:
    async def test_uploads_in_order(self):
        storage = InMemoryStorage(public_base_url=BASE)

        urls, paths = await upload_gallery_images(storage, "gallery", 9, [b"1", b"2", b"3"])

        assert len(urls) == 3
        assert [url.removeprefix(f"{BASE}/gallery/") for url in urls] == paths
        assert all(path.startswith("9/images/") for path in paths)
