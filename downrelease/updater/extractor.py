"""Streaming extraction of gzip-compressed tar archives.

Entries are read and applied one at a time straight from the input
stream, so archives are never buffered in memory or on disk.
"""

import logging
import tarfile
import zlib
from pathlib import Path, PurePosixPath
from typing import BinaryIO, List, Optional, Union

from downrelease.updater.exceptions import (
    ArchiveFilesystemError,
    ArchiveFormatError,
    UnsafeEntryPathError,
    UnsupportedEntryError,
)
from downrelease.updater.release import ArchiveEntry, EntryType

logger = logging.getLogger("downrelease.extractor")


DIRECTORY_MODE = 0o755
COPY_BUFSIZE = 64 * 1024

# Errors raised by tarfile/zlib on corrupt or truncated input
_FORMAT_ERRORS = (tarfile.TarError, zlib.error, EOFError)


def _resolve_entry_path(root: Path, name: str, safe_paths: bool) -> Path:
    """
    Map an archive member name onto the extraction directory.

    Raises:
        UnsafeEntryPathError: If safe_paths is set and the name is absolute
            or resolves outside root
    """
    if not safe_paths:
        return root / name

    member_path = PurePosixPath(name)
    if member_path.is_absolute() or ".." in member_path.parts:
        raise UnsafeEntryPathError(name)

    target = root / member_path
    # Pre-existing symlinked directories could still lead outside root
    try:
        target.resolve().relative_to(root.resolve())
    except ValueError:
        raise UnsafeEntryPathError(name) from None
    return target


def _make_directory(path: Path, name: str) -> None:
    try:
        path.mkdir(mode=DIRECTORY_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise ArchiveFilesystemError(name, "create directory", e) from e


def _write_file(archive: tarfile.TarFile, member: tarfile.TarInfo, path: Path) -> None:
    source = archive.extractfile(member)
    if source is None:
        raise ArchiveFormatError(f"read payload of '{member.name}'")

    if not path.parent.is_dir():
        _make_directory(path.parent, str(path.parent))

    try:
        out = open(path, "wb")
    except OSError as e:
        raise ArchiveFilesystemError(member.name, "create file", e) from e

    # Transport errors from the source stream propagate unchanged
    with out:
        while True:
            try:
                chunk = source.read(COPY_BUFSIZE)
            except _FORMAT_ERRORS as e:
                raise ArchiveFormatError(f"read payload of '{member.name}'", e) from e
            if not chunk:
                break
            try:
                out.write(chunk)
            except OSError as e:
                raise ArchiveFilesystemError(member.name, "write file", e) from e


def _apply_entry(
    archive: tarfile.TarFile,
    member: tarfile.TarInfo,
    root: Path,
    safe_paths: bool
) -> ArchiveEntry:
    """Apply a single tar member to the filesystem."""
    if member.isdir():
        path = _resolve_entry_path(root, member.name, safe_paths)
        logger.debug(f"Creating directory {member.name}")
        _make_directory(path, member.name)
        return ArchiveEntry(EntryType.DIRECTORY, member.name)

    if member.isreg():
        path = _resolve_entry_path(root, member.name, safe_paths)
        logger.debug(f"Writing {member.name} ({member.size} bytes)")
        _write_file(archive, member, path)
        return ArchiveEntry(EntryType.REGULAR, member.name, member.size)

    raise UnsupportedEntryError(member.name, member.type)


def extract_archive(
    stream: BinaryIO,
    dest_dir: Optional[Union[str, Path]] = None,
    safe_paths: bool = True
) -> List[ArchiveEntry]:
    """
    Decompress a .tar.gz stream and unpack it into a directory.

    Entries are applied strictly in stream order. Directories and regular
    files are supported; anything else aborts extraction. Entries applied
    before a failure are left in place.

    Args:
        stream: Readable binary stream of gzip-compressed tar data
        dest_dir: Extraction directory (default: current working directory)
        safe_paths: Reject absolute or parent-traversing entry paths

    Returns:
        Applied entries in stream order

    Raises:
        ArchiveFormatError: If the stream is not valid gzip/tar data
        ArchiveFilesystemError: If a directory or file cannot be written
        UnsupportedEntryError: If an entry is not a directory or regular file
        UnsafeEntryPathError: If safe_paths is set and an entry escapes dest_dir
    """
    root = Path(dest_dir) if dest_dir is not None else Path.cwd()

    try:
        archive = tarfile.open(fileobj=stream, mode="r|gz")
    except _FORMAT_ERRORS as e:
        raise ArchiveFormatError("open gzip stream", e) from e

    entries: List[ArchiveEntry] = []
    with archive:
        members = iter(archive)
        while True:
            try:
                member = next(members, None)
            except _FORMAT_ERRORS as e:
                raise ArchiveFormatError("read next entry", e) from e
            if member is None:
                break
            entries.append(_apply_entry(archive, member, root, safe_paths))

    logger.info(f"Extracted {len(entries)} entries into {root}")
    return entries
