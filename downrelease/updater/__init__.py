"""Updater module for GitHub releases.

This module handles the release pipeline:
- GitHubClient: latest-release resolution and artifact streaming
- build_download_link: platform-specific artifact URLs
- extract_archive: streaming .tar.gz extraction
- ReleaseDownloader: resolve/download/extract orchestration
"""

from .release import (
    ArchiveEntry,
    DownloadTarget,
    EntryType,
    InstallResult,
    ReleaseMetadata,
    RepositoryIdentifier,
    strip_version_prefix,
)
from .exceptions import (
    ArchiveError,
    ArchiveFilesystemError,
    ArchiveFormatError,
    ReleaseConnectionError,
    ReleaseDecodeError,
    ReleaseError,
    ReleaseNotFoundError,
    ReleaseRateLimitError,
    UnsafeEntryPathError,
    UnsupportedEntryError,
)
from .links import build_archive_name, build_download_link, current_platform
from .extractor import extract_archive
from .github_client import ClientConfig, GitHubClient
from .downloader import InstallFailure, ReleaseDownloader

__all__ = [
    # Models
    "ArchiveEntry",
    "DownloadTarget",
    "EntryType",
    "InstallResult",
    "ReleaseMetadata",
    "RepositoryIdentifier",
    "strip_version_prefix",
    # Errors
    "ArchiveError",
    "ArchiveFilesystemError",
    "ArchiveFormatError",
    "ReleaseConnectionError",
    "ReleaseDecodeError",
    "ReleaseError",
    "ReleaseNotFoundError",
    "ReleaseRateLimitError",
    "UnsafeEntryPathError",
    "UnsupportedEntryError",
    # Links
    "build_archive_name",
    "build_download_link",
    "current_platform",
    # Extraction
    "extract_archive",
    # Client
    "ClientConfig",
    "GitHubClient",
    # Downloader
    "InstallFailure",
    "ReleaseDownloader",
]
