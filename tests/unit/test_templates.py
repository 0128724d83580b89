# ABOUTME: Unit tests for the default EPUB template renderer.
# ABOUTME: Checks manifest, spine, navigation and page markup before tag substitution.

from pathlib import Path

from quire.core.builder import contents_entries
from quire.core.document import Document
from quire.formats.templates import (
    EpubTemplates,
    TemplateRenderer,
    get_image_media_type,
    section_filename,
)


def _prepared(document: Document) -> Document:
    document.toc_entries = contents_entries(document)
    return document


class TestHelpers:
    """Tests for module-level helpers."""

    def test_media_types(self) -> None:
        assert get_image_media_type("a.PNG") == "image/png"
        assert get_image_media_type("b.jpeg") == "image/jpeg"
        assert get_image_media_type("c.bin") == "application/octet-stream"

    def test_section_filename(self) -> None:
        assert section_filename(3) == "s3.xhtml"

    def test_default_renderer_satisfies_protocol(self) -> None:
        assert isinstance(EpubTemplates(), TemplateRenderer)


class TestPackage:
    """Tests for the OPF package manifest."""

    def test_points_at_package(self, sample_document: Document) -> None:
        container = EpubTemplates().container(sample_document)
        assert 'full-path="OEBPS/ebook.opf"' in container
        assert "[[EOL]]" in container

    def test_metadata_values(self, sample_document: Document) -> None:
        opf = EpubTemplates().package(_prepared(sample_document))
        assert (
            '<dc:identifier id="BookId">urn:uuid:3f0c5e2a-0000-4000-8000-000000000001'
            "</dc:identifier>"
        ) in opf
        assert 'opf:file-as="Eco, Umberto">Umberto Eco</dc:creator>' in opf
        assert "<dc:subject>Mystery</dc:subject>" in opf
        assert "<dc:subject>Medieval</dc:subject>" in opf
        assert "<dc:subject>Monastery</dc:subject>" in opf
        assert '<meta name="calibre:series_index" content="1"/>' in opf
        assert '<meta name="dcterms:modified" content="[[MODIFIED]]"/>' in opf

    def test_metadata_values_escaped(self, cover_image: Path) -> None:
        document = Document(
            {"id": "x", "title": "War & Peace", "author": "A <B>", "genre": "g",
             "file_as": 'B "A"'},
            cover_image,
        )
        opf = EpubTemplates().package(_prepared(document))
        assert "<dc:title>War &amp; Peace</dc:title>" in opf
        assert 'opf:file-as="B &quot;A&quot;">A &lt;B&gt;</dc:creator>' in opf

    def test_optional_fields_omitted_when_unset(self, cover_image: Path) -> None:
        document = Document({"id": "x", "title": "t", "author": "a", "genre": "g"}, cover_image)
        opf = EpubTemplates().package(_prepared(document))
        assert "dc:publisher" not in opf
        assert "calibre:series" not in opf
        assert "<dc:language>en</dc:language>" in opf

    def test_manifest_lists_sections_and_images(
        self, sample_metadata: dict, cover_image: Path, extra_images: list[Path]
    ) -> None:
        sample_metadata["images"] = extra_images
        document = Document(sample_metadata, cover_image)
        document.add_section("One", "<p>1</p>")
        opf = EpubTemplates().package(_prepared(document))
        assert 'href="content/s1.xhtml"' in opf
        assert 'href="images/a.png" media-type="image/png"' in opf
        assert 'href="images/b.jpg" media-type="image/jpeg"' in opf
        assert 'href="images/cover.png"' in opf

    def test_spine_places_front_matter_before_contents(self, sample_document: Document) -> None:
        opf = EpubTemplates().package(_prepared(sample_document))
        spine = opf[opf.index("<spine"):opf.index("</spine>")]
        order = [spine.index(f'idref="{ref}"') for ref in ("cover", "s1", "toc", "s2", "s3")]
        assert order == sorted(order)

    def test_guide_points_at_first_main_section(self, sample_document: Document) -> None:
        opf = EpubTemplates().package(_prepared(sample_document))
        assert '<reference type="text" title="Text" href="content/s2.xhtml"/>' in opf


class TestNavigation:
    """Tests for the NCX navigation map."""

    def test_nav_points_follow_contents_entries(self, sample_document: Document) -> None:
        ncx = EpubTemplates().navigation(_prepared(sample_document))
        assert ncx.count("<navPoint ") == 3
        assert '<content src="content/toc.xhtml"/>' in ncx
        assert '<content src="content/s2.xhtml"/>' in ncx
        assert 'content src="content/s1.xhtml"' not in ncx

    def test_head_values_escaped(self, cover_image: Path) -> None:
        document = Document(
            {"id": "a&b", "title": "War & Peace", "author": "Tolstoy", "genre": "g"}, cover_image
        )
        ncx = EpubTemplates().navigation(_prepared(document))
        assert '<meta name="dtb:uid" content="a&amp;b"/>' in ncx
        assert "<docTitle><text>War &amp; Peace</text></docTitle>" in ncx


class TestPages:
    """Tests for cover, section and contents markup."""

    def test_cover_references_image(self, sample_document: Document) -> None:
        cover = EpubTemplates().cover(sample_document)
        assert 'src="images/cover.png"' in cover
        assert 'href="css/ebook.css"' in cover

    def test_section_escapes_title_and_keeps_markup(self, sample_document: Document) -> None:
        sample_document.add_section("Fish & Chips", "<p><em>raw</em></p>")
        page = EpubTemplates().section(sample_document, 4)
        assert "<title>Fish &amp; Chips</title>" in page
        assert "<p><em>raw</em></p>" in page
        assert 'href="../css/ebook.css"' in page

    def test_default_contents_lists_included_sections(self, sample_document: Document) -> None:
        page = EpubTemplates().contents(_prepared(sample_document))
        assert "<h1>Table of Contents</h1>" in page
        assert '<a href="s2.xhtml">Chapter 1</a>' in page
        assert 's1.xhtml' not in page
        assert 'href="toc.xhtml"' not in page

    def test_generated_contents_used_verbatim(self, sample_document: Document) -> None:
        page = EpubTemplates().contents(_prepared(sample_document), "<ol><li>custom</li></ol>")
        assert "<ol><li>custom</li></ol>" in page
        assert "<ul>" not in page

    def test_contents_heading_fallback(self, cover_image: Path) -> None:
        document = Document({"id": "x", "title": "t", "author": "a", "genre": "g"}, cover_image)
        page = EpubTemplates().contents(_prepared(document))
        assert "<h1>Contents</h1>" in page
