# ABOUTME: Unit tests for the Document model.
# ABOUTME: Covers construction validation, section and CSS mutation, and hook checks.

from pathlib import Path

import pytest

from quire.core.document import CallbackContractError, Document, Section
from quire.formats.templates import EpubTemplates
from quire.metadata import Metadata, ValidationError


class TestDocumentConstruction:
    """Tests for Document validation at construction time."""

    def test_valid_construction(self, sample_metadata: dict, cover_image: Path) -> None:
        document = Document(sample_metadata, cover_image)
        assert document.metadata.title == "The Name of the Rose"
        assert document.cover_image == cover_image
        assert document.css == ""
        assert document.sections == []
        assert document.toc_generator is None
        assert isinstance(document.renderer, EpubTemplates)

    def test_accepts_metadata_instance(self, cover_image: Path) -> None:
        meta = Metadata(id="x", title="t", author="a", genre="g")
        document = Document(meta, cover_image)
        assert document.metadata is meta

    def test_missing_metadata_raises(self, cover_image: Path) -> None:
        with pytest.raises(ValidationError, match="^Missing metadata$"):
            Document(None, cover_image)

    @pytest.mark.parametrize("field_name", ["id", "title", "author", "genre"])
    def test_blank_required_field_raises(
        self, sample_metadata: dict, cover_image: Path, field_name: str
    ) -> None:
        sample_metadata[field_name] = ""
        with pytest.raises(ValidationError, match=f"Missing metadata: {field_name}"):
            Document(sample_metadata, cover_image)

    def test_invalid_metadata_instance_raises(self, cover_image: Path) -> None:
        meta = Metadata(id="x", title="t", author=" ", genre="g")
        with pytest.raises(ValidationError, match="Missing metadata: author"):
            Document(meta, cover_image)

    def test_omitted_cover_raises(self, sample_metadata: dict) -> None:
        with pytest.raises(ValidationError, match="Missing cover image"):
            Document(sample_metadata)

    def test_none_cover_raises(self, sample_metadata: dict) -> None:
        with pytest.raises(ValidationError, match="Missing cover image"):
            Document(sample_metadata, None)

    def test_empty_cover_path_accepted(self, sample_metadata: dict) -> None:
        """Only presence of the cover argument is checked, not its content."""
        document = Document(sample_metadata, "")
        assert document.cover_image == ""

    def test_stores_toc_generator(self, sample_metadata: dict, cover_image: Path) -> None:
        def generator(entries: list) -> str:
            return ""

        document = Document(sample_metadata, cover_image, generator)
        assert document.toc_generator is generator


class TestDocumentMutation:
    """Tests for add_section, add_css and section_count."""

    def test_section_count_tracks_additions(
        self, sample_metadata: dict, cover_image: Path
    ) -> None:
        document = Document(sample_metadata, cover_image)
        assert document.section_count() == 0
        document.add_section("One", "<p>1</p>")
        document.add_section("Two", "<p>2</p>", True)
        document.add_section("Three", "<p>3</p>", False, True)
        document.add_section("", "")
        assert document.section_count() == 4

    def test_section_defaults(self, sample_metadata: dict, cover_image: Path) -> None:
        document = Document(sample_metadata, cover_image)
        document.add_section("One", "<p>1</p>")
        assert document.sections == [Section("One", "<p>1</p>", False, False)]

    def test_sections_keep_call_order(self, sample_document: Document) -> None:
        titles = [section.title for section in sample_document.sections]
        assert titles == ["Dedication", "Chapter 1", "Chapter 2"]
        assert sample_document.sections[0].is_front_matter is True
        assert sample_document.sections[0].exclude_from_contents is True

    def test_add_css_last_write_wins(self, sample_metadata: dict, cover_image: Path) -> None:
        document = Document(sample_metadata, cover_image)
        document.add_css("a {}")
        document.add_css("b {}")
        assert document.css == "b {}"


class TestWriteEpubHooks:
    """Tests for the completion hook contract of write_epub."""

    def test_non_callable_success_hook_raises_immediately(
        self, sample_document: Document, tmp_path: Path
    ) -> None:
        with pytest.raises(CallbackContractError, match="on_success"):
            sample_document.write_epub(tmp_path, "book", on_success="done")
        assert not (tmp_path / "book.epub").exists()

    def test_non_callable_error_hook_raises_immediately(
        self, sample_document: Document, tmp_path: Path
    ) -> None:
        with pytest.raises(CallbackContractError, match="on_error"):
            sample_document.write_epub(tmp_path, "book", on_error=42)
