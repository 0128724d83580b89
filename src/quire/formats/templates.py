# ABOUTME: Default template renderer producing the EPUB 2 structural and markup files.
# ABOUTME: Metadata is inserted XML-escaped; [[EOL]] and [[MODIFIED]] are left for substitution.

from __future__ import annotations

from html import escape
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from quire.core.document import Document

PACKAGE_FOLDER = "OEBPS"
PACKAGE_FILE = "ebook.opf"
NAVIGATION_FILE = "navigation.ncx"
COVER_PAGE = "cover.xhtml"
STYLESHEET = "ebook.css"
CONTENTS_PAGE = "toc.xhtml"
COVER_IMAGE = "cover.png"

IMAGE_MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
}


def get_image_media_type(filename: str) -> str:
    """Media type for an image filename, by extension."""
    ext = Path(filename).suffix.lower()
    return IMAGE_MEDIA_TYPES.get(ext, "application/octet-stream")


def section_filename(number: int) -> str:
    """Filename of the 1-based section page."""
    return f"s{number}.xhtml"


@runtime_checkable
class TemplateRenderer(Protocol):
    """Protocol for producing the raw text of each package artifact.

    Implementations return markup that may contain [[TAG]] tokens; the
    builder substitutes them afterwards.
    """

    def container(self, document: Document) -> str: ...

    def package(self, document: Document) -> str: ...

    def navigation(self, document: Document) -> str: ...

    def cover(self, document: Document) -> str: ...

    def section(self, document: Document, number: int) -> str: ...

    def contents(self, document: Document, generated: str | None = None) -> str: ...


def _xml(value: object) -> str:
    """XML-escaped text of a metadata value; falsy values become empty."""
    return escape(str(value)) if value else ""


def _contents_heading(document: Document) -> str:
    return _xml(document.metadata.contents) or "Contents"


def _xhtml_page(title: str, body: str, css_href: str, language: str) -> str:
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.1//EN" "http://www.w3.org/TR/xhtml11/DTD/xhtml11.dtd">
<html xmlns="http://www.w3.org/1999/xhtml" xml:lang="{language}">
<head>
  <title>{title}</title>
  <meta http-equiv="Content-Type" content="text/html; charset=UTF-8"/>
  <link rel="stylesheet" type="text/css" href="{css_href}"/>
</head>
<body>
{body}
</body>
</html>
"""


class EpubTemplates:
    """Renders the fixed EPUB 2 file set for a Document.

    Package layout::

        mimetype
        META-INF/container.xml
        OEBPS/ebook.opf
        OEBPS/navigation.ncx
        OEBPS/cover.xhtml
        OEBPS/css/ebook.css
        OEBPS/content/s1.xhtml ... sN.xhtml
        OEBPS/content/toc.xhtml
        OEBPS/images/cover.png (+ metadata images)
    """

    def container(self, document: Document) -> str:
        return (
            '<?xml version="1.0" encoding="UTF-8"?>[[EOL]]'
            '<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">[[EOL]]'
            "  <rootfiles>[[EOL]]"
            f'    <rootfile full-path="{PACKAGE_FOLDER}/{PACKAGE_FILE}" '
            'media-type="application/oebps-package+xml"/>[[EOL]]'
            "  </rootfiles>[[EOL]]"
            "</container>"
        )

    def package(self, document: Document) -> str:
        metadata = document.metadata
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<package xmlns="http://www.idpf.org/2007/opf" version="2.0" unique-identifier="BookId">',
            '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/" '
            'xmlns:dcterms="http://purl.org/dc/terms/" '
            'xmlns:opf="http://www.idpf.org/2007/opf" '
            'xmlns:calibre="http://calibre.kovidgoyal.net/2009/metadata">',
            f'    <dc:identifier id="BookId">{_xml(metadata.id)}</dc:identifier>',
            f"    <dc:title>{_xml(metadata.title)}</dc:title>",
            f'    <dc:creator opf:role="aut" opf:file-as="{_xml(metadata.file_as)}">'
            f'{_xml(metadata.author)}</dc:creator>',
            f"    <dc:language>{escape(metadata.language or 'en')}</dc:language>",
            f"    <dc:subject>{_xml(metadata.genre)}</dc:subject>",
        ]
        for tag in metadata.tag_list:
            lines.append(f"    <dc:subject>{escape(tag)}</dc:subject>")
        if metadata.published:
            lines.append(f"    <dc:date>{_xml(metadata.published)}</dc:date>")
        if metadata.publisher:
            lines.append(f"    <dc:publisher>{_xml(metadata.publisher)}</dc:publisher>")
        if metadata.description:
            lines.append(f"    <dc:description>{_xml(metadata.description)}</dc:description>")
        if metadata.copyright:
            lines.append(f"    <dc:rights>{_xml(metadata.copyright)}</dc:rights>")
        if metadata.source:
            lines.append(f"    <dc:source>{_xml(metadata.source)}</dc:source>")
        lines.append('    <meta name="dcterms:modified" content="[[MODIFIED]]"/>')
        if metadata.series:
            lines.append(f'    <meta name="calibre:series" content="{_xml(metadata.series)}"/>')
            if metadata.sequence:
                lines.append(
                    f'    <meta name="calibre:series_index" content="{_xml(metadata.sequence)}"/>'
                )
        lines.append('    <meta name="cover" content="cover-image"/>')
        lines.append("  </metadata>")

        lines.append("  <manifest>")
        lines.append(
            f'    <item id="ncx" href="{NAVIGATION_FILE}" media-type="application/x-dtbncx+xml"/>'
        )
        lines.append(
            f'    <item id="cover" href="{COVER_PAGE}" media-type="application/xhtml+xml"/>'
        )
        lines.append(
            f'    <item id="cover-image" href="images/{COVER_IMAGE}" media-type="image/png"/>'
        )
        lines.append(f'    <item id="css" href="css/{STYLESHEET}" media-type="text/css"/>')
        lines.append(
            f'    <item id="toc" href="content/{CONTENTS_PAGE}" media-type="application/xhtml+xml"/>'
        )
        for number in range(1, document.section_count() + 1):
            lines.append(
                f'    <item id="s{number}" href="content/{section_filename(number)}" '
                'media-type="application/xhtml+xml"/>'
            )
        for index, image in enumerate(document.metadata.images, start=1):
            name = Path(image).name
            lines.append(
                f'    <item id="img{index}" href="images/{escape(name)}" '
                f'media-type="{get_image_media_type(name)}"/>'
            )
        lines.append("  </manifest>")

        lines.append('  <spine toc="ncx">')
        lines.append('    <itemref idref="cover" linear="no"/>')
        for number, section in enumerate(document.sections, start=1):
            if section.is_front_matter:
                lines.append(f'    <itemref idref="s{number}"/>')
        lines.append('    <itemref idref="toc"/>')
        for number, section in enumerate(document.sections, start=1):
            if not section.is_front_matter:
                lines.append(f'    <itemref idref="s{number}"/>')
        lines.append("  </spine>")

        lines.append("  <guide>")
        lines.append(f'    <reference type="cover" title="Cover" href="{COVER_PAGE}"/>')
        lines.append(
            f'    <reference type="toc" title="{_contents_heading(document)}" '
            f'href="content/{CONTENTS_PAGE}"/>'
        )
        first_main = next(
            (n for n, s in enumerate(document.sections, start=1) if not s.is_front_matter),
            None,
        )
        if first_main is not None:
            lines.append(
                f'    <reference type="text" title="Text" href="content/{section_filename(first_main)}"/>'
            )
        lines.append("  </guide>")
        lines.append("</package>")
        return "[[EOL]]".join(lines)

    def navigation(self, document: Document) -> str:
        metadata = document.metadata
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<!DOCTYPE ncx PUBLIC "-//NISO//DTD ncx 2005-1//EN" '
            '"http://www.daisy.org/z3986/2005/ncx-2005-1.dtd">',
            '<ncx xmlns="http://www.daisy.org/z3986/2005/ncx/" version="2005-1">',
            "  <head>",
            f'    <meta name="dtb:uid" content="{_xml(metadata.id)}"/>',
            '    <meta name="dtb:depth" content="1"/>',
            '    <meta name="dtb:totalPageCount" content="0"/>',
            '    <meta name="dtb:maxPageNumber" content="0"/>',
            "  </head>",
            f"  <docTitle><text>{_xml(metadata.title)}</text></docTitle>",
            f"  <docAuthor><text>{_xml(metadata.author)}</text></docAuthor>",
            "  <navMap>",
        ]
        for order, entry in enumerate(document.toc_entries, start=1):
            lines.extend([
                f'    <navPoint id="navpoint-{order}" playOrder="{order}">',
                f"      <navLabel><text>{escape(entry.title)}</text></navLabel>",
                f'      <content src="content/{entry.link}"/>',
                "    </navPoint>",
            ])
        lines.append("  </navMap>")
        lines.append("</ncx>")
        return "[[EOL]]".join(lines)

    def cover(self, document: Document) -> str:
        language = escape(document.metadata.language or "en")
        body = (
            '  <div class="cover">\n'
            f'    <img src="images/{COVER_IMAGE}" alt="Cover image"/>\n'
            "  </div>"
        )
        return _xhtml_page(_xml(document.metadata.title), body, f"css/{STYLESHEET}", language)

    def section(self, document: Document, number: int) -> str:
        section = document.sections[number - 1]
        language = escape(document.metadata.language or "en")
        body = f'  <div id="s{number}">\n{section.content}\n  </div>'
        return _xhtml_page(escape(section.title), body, f"../css/{STYLESHEET}", language)

    def contents(self, document: Document, generated: str | None = None) -> str:
        language = escape(document.metadata.language or "en")
        heading = _contents_heading(document)
        if generated is not None:
            listing = generated
        else:
            items = [
                f'      <li><a href="{entry.link}">{escape(entry.title)}</a></li>'
                for entry in document.toc_entries
                if entry.item_type != "contents"
            ]
            listing = "    <ul>\n" + "\n".join(items) + "\n    </ul>"
        body = f'  <div class="contents">\n    <h1>{heading}</h1>\n{listing}\n  </div>'
        return _xhtml_page(heading, body, f"../css/{STYLESHEET}", language)
