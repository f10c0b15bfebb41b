"""Pytest configuration and shared fixtures for downrelease tests."""

import io
import tarfile
from typing import Callable, List, Optional, Tuple

import pytest


# (name, kind, payload) where kind is "dir", "file", "symlink" or "fifo";
# payload is file bytes or symlink target
ArchiveSpec = List[Tuple[str, str, Optional[object]]]


def build_tar_gz(entries: ArchiveSpec) -> bytes:
    """Build an in-memory .tar.gz with entries in the given order."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for name, kind, payload in entries:
            info = tarfile.TarInfo(name)
            if kind == "dir":
                info.type = tarfile.DIRTYPE
                info.mode = 0o755
                tar.addfile(info)
            elif kind == "file":
                info.size = len(payload)
                info.mode = 0o644
                tar.addfile(info, io.BytesIO(payload))
            elif kind == "symlink":
                info.type = tarfile.SYMTYPE
                info.linkname = payload
                tar.addfile(info)
            elif kind == "fifo":
                info.type = tarfile.FIFOTYPE
                tar.addfile(info)
            else:
                raise ValueError(f"unknown entry kind {kind}")
    return buffer.getvalue()


@pytest.fixture
def tar_gz_factory() -> Callable[[ArchiveSpec], bytes]:
    """Provide the archive builder to tests."""
    return build_tar_gz


@pytest.fixture
def ngo_archive() -> bytes:
    """A release archive shaped like a goreleaser tarball."""
    return build_tar_gz([
        ("ngo", "file", b"#!/bin/sh\necho ngo\n"),
        ("docs", "dir", None),
        ("docs/README.md", "file", b"# ngo\n"),
        ("LICENSE", "file", b"MIT\n"),
    ])


@pytest.fixture
def temp_settings_file(tmp_path):
    """Provide a temporary settings file path for testing."""
    return tmp_path / "settings.json"
