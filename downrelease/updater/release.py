"""Release data models for downrelease.

Defines the repository, download target, release metadata and
archive entry dataclasses shared by the pipeline stages.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional


VERSION_PREFIX = "v"


def strip_version_prefix(version: str) -> str:
    """Drop a single leading 'v' from a version tag."""
    if version.startswith(VERSION_PREFIX):
        return version[len(VERSION_PREFIX):]
    return version


@dataclass(frozen=True)
class RepositoryIdentifier:
    """Owner and name addressing a remote repository."""
    owner: str
    name: str

    def __post_init__(self):
        if not self.owner or not self.name:
            raise ValueError(
                f"Repository owner and name are required, got {self.owner!r}/{self.name!r}"
            )

    def __str__(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, spec: str) -> "RepositoryIdentifier":
        """
        Parse an 'owner/name' string.

        Args:
            spec: Repository in owner/name notation

        Returns:
            RepositoryIdentifier instance

        Raises:
            ValueError: If spec is not of the form owner/name
        """
        parts = spec.strip().strip("/").split("/")
        if len(parts) != 2:
            raise ValueError(f"Expected owner/name, got {spec!r}")
        return cls(owner=parts[0], name=parts[1])


@dataclass(frozen=True)
class DownloadTarget:
    """What artifact to fetch: a repository plus the binary inside its archive."""
    repo: RepositoryIdentifier
    binary: str

    @classmethod
    def for_repository(
        cls,
        repo: RepositoryIdentifier,
        binary: Optional[str] = None
    ) -> "DownloadTarget":
        """Create a target whose binary defaults to the repository name."""
        return cls(repo=repo, binary=binary or repo.name)


@dataclass
class ReleaseMetadata:
    """Fields of the latest-release response the pipeline cares about."""
    id: int
    tag_name: str
    update_url: str
    update_authenticity_token: str
    delete_url: str
    delete_authenticity_token: str
    edit_url: str

    @classmethod
    def from_api_response(cls, data: dict) -> "ReleaseMetadata":
        """Create ReleaseMetadata from the latest-release JSON body."""
        return cls(
            id=data.get("id") or 0,
            tag_name=data.get("tag_name") or "",
            update_url=data.get("update_url") or "",
            update_authenticity_token=data.get("update_authenticity_token") or "",
            delete_url=data.get("delete_url") or "",
            delete_authenticity_token=data.get("delete_authenticity_token") or "",
            edit_url=data.get("edit_url") or "",
        )


class EntryType(Enum):
    """Archive entry kinds the extractor knows how to apply."""
    DIRECTORY = "directory"
    REGULAR = "regular"


@dataclass
class ArchiveEntry:
    """One directory or regular file applied from an archive stream."""
    entry_type: EntryType
    path: str
    size: int = 0

    @property
    def is_directory(self) -> bool:
        """True for directory entries."""
        return self.entry_type == EntryType.DIRECTORY


@dataclass
class InstallResult:
    """Outcome of one resolve/download/extract cycle."""
    repo: RepositoryIdentifier
    version: str
    download_url: str
    extract_dir: Path
    binary_path: Path
    entries: List[ArchiveEntry] = field(default_factory=list)
    installed_path: Optional[Path] = None

    @property
    def final_path(self) -> Path:
        """Where the binary ended up."""
        return self.installed_path or self.binary_path

    @property
    def file_count(self) -> int:
        """Number of regular files written."""
        return sum(1 for e in self.entries if not e.is_directory)
