# ABOUTME: Shared pytest fixtures for Quire tests.
# ABOUTME: Provides image files, metadata, documents and a JSON project on disk.

import json
from pathlib import Path

import pytest

from quire.core.document import Document

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR fake png payload"


@pytest.fixture
def cover_image(tmp_path: Path) -> Path:
    """A cover image file on disk."""
    path = tmp_path / "images" / "cover-art.png"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(PNG_BYTES)
    return path


@pytest.fixture
def extra_images(tmp_path: Path) -> list[Path]:
    """Two extra image files referenced from metadata."""
    folder = tmp_path / "images"
    folder.mkdir(parents=True, exist_ok=True)
    first = folder / "a.png"
    second = folder / "b.jpg"
    first.write_bytes(b"image-a")
    second.write_bytes(b"image-b")
    return [first, second]


@pytest.fixture
def sample_metadata() -> dict:
    """Metadata mapping with every required and most optional fields."""
    return {
        "id": "urn:uuid:3f0c5e2a-0000-4000-8000-000000000001",
        "title": "The Name of the Rose",
        "author": "Umberto Eco",
        "genre": "Mystery",
        "file_as": "Eco, Umberto",
        "language": "en",
        "publisher": "Harcourt",
        "description": "A mystery set in a medieval monastery.",
        "published": "1980-01-01",
        "copyright": "Umberto Eco, 1980",
        "series": "Standalone",
        "sequence": 1,
        "tags": "Medieval, Monastery",
        "contents": "Table of Contents",
        "source": "Print edition",
    }


@pytest.fixture
def sample_document(sample_metadata: dict, cover_image: Path) -> Document:
    """A document with one front matter section and two chapters."""
    document = Document(sample_metadata, cover_image)
    document.add_css("body { font-family: serif; }")
    document.add_section("Dedication", "<p>For [[AUTHOR]]</p>", True, True)
    document.add_section("Chapter 1", "<p>First day.</p>")
    document.add_section("Chapter 2", "<p>Second day.</p>")
    return document


@pytest.fixture
def sample_project(tmp_path: Path, sample_metadata: dict, cover_image: Path) -> Path:
    """A JSON project file with a stylesheet and a section read from disk."""
    project_dir = tmp_path
    (project_dir / "style.css").write_text("p { margin: 0; }", encoding="utf-8")
    (project_dir / "ch1.html").write_text("<p>It was a dark night.</p>", encoding="utf-8")
    data = {
        "metadata": sample_metadata,
        "cover": str(cover_image.relative_to(project_dir)),
        "css": "style.css",
        "sections": [
            {
                "title": "Dedication",
                "content": "<p>For you</p>",
                "exclude_from_contents": True,
                "front_matter": True,
            },
            {"title": "Chapter 1", "file": "ch1.html"},
        ],
    }
    path = project_dir / "rose.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
