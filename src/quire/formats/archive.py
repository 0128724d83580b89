# ABOUTME: Writes an ordered EPUB file list to a directory tree or a ZIP container.
# ABOUTME: Keeps the stored mimetype entry first and honors per-file compression flags.

import asyncio
import logging
import os
import zipfile
from pathlib import Path

from quire.core.builder import FileDescriptor, GenerationError

logger = logging.getLogger(__name__)

EPUB_EXTENSION = ".epub"


class PackageWriteError(GenerationError):
    """Raised when package files cannot be written to disk."""


def _write_file(root: Path, file: FileDescriptor) -> None:
    target_dir = root / file.folder if file.folder else root
    target_dir.mkdir(parents=True, exist_ok=True)
    (target_dir / file.name).write_bytes(file.data)


async def write_directory(files: list[FileDescriptor], folder: Path) -> None:
    """Write each file under folder, creating subfolders as needed.

    Existing folders are reused. Writes run concurrently and are not
    transactional: when one fails, its siblings may already be on disk.

    Raises:
        PackageWriteError: For the first failed write, in file order, once
            every write has settled.
    """
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise PackageWriteError(f"Failed to create folder: {folder}: {exc}") from exc

    results = await asyncio.gather(
        *(asyncio.to_thread(_write_file, folder, file) for file in files),
        return_exceptions=True,
    )
    for file, result in zip(files, results):
        if isinstance(result, BaseException):
            raise PackageWriteError(
                f"Failed to write {file.path} under {folder}: {result}"
            ) from result

    logger.info("Wrote %d files to %s", len(files), folder)


def _check_mimetype_first(files: list[FileDescriptor]) -> None:
    if not files:
        raise PackageWriteError("Cannot write an empty package")
    first = files[0]
    if first.name != "mimetype" or first.folder or first.compress:
        raise PackageWriteError("The first entry must be an uncompressed root mimetype file")


def _write_zip(files: list[FileDescriptor], dest: Path) -> None:
    partial = dest.with_name(dest.name + ".part")
    try:
        with zipfile.ZipFile(partial, "w") as archive:
            for file in files:
                compress_type = zipfile.ZIP_DEFLATED if file.compress else zipfile.ZIP_STORED
                archive.writestr(file.path, file.data, compress_type=compress_type)
        os.replace(partial, dest)
    except BaseException:
        partial.unlink(missing_ok=True)
        raise


async def write_archive(files: list[FileDescriptor], dest: Path) -> Path:
    """Write files into a single EPUB container at dest.

    Entries are appended in list order. The archive is assembled beside dest
    and only moved into place once every entry has been written, so a failed
    write never leaves a complete-looking file behind.

    Args:
        files: Ordered file list whose first entry is the stored mimetype.
        dest: Path of the archive to create.

    Returns:
        The path of the written archive.

    Raises:
        PackageWriteError: If the list is malformed or the archive cannot be
            written.
    """
    _check_mimetype_first(files)
    try:
        await asyncio.to_thread(_write_zip, files, dest)
    except OSError as exc:
        raise PackageWriteError(f"Failed to write archive: {dest}: {exc}") from exc

    logger.info("Wrote %s (%d entries)", dest, len(files))
    return dest
