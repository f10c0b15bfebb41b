"""Release downloader for downrelease.

Runs the resolve -> link -> download -> extract -> chmod pipeline for
one repository at a time.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

import requests
import urllib3

from downrelease.updater.exceptions import (
    ArchiveFilesystemError,
    ReleaseConnectionError,
    ReleaseError,
)
from downrelease.updater.extractor import extract_archive
from downrelease.updater.github_client import ClientConfig, GitHubClient
from downrelease.updater.links import build_download_link, current_platform
from downrelease.updater.release import DownloadTarget, InstallResult

logger = logging.getLogger("downrelease.downloader")


BINARY_MODE = 0o755


@dataclass
class InstallFailure:
    """A repository whose pipeline failed during a batch run."""
    target: DownloadTarget
    error: ReleaseError


class ReleaseDownloader:
    """Downloads and unpacks the latest release of repositories."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        dest_dir: Optional[Union[str, Path]] = None,
        install_dir: Optional[Union[str, Path]] = None,
        safe_paths: bool = True,
        platform_pair: Optional[Tuple[str, str]] = None,
        client: Optional[GitHubClient] = None
    ):
        """
        Initialize the downloader.

        Args:
            config: HTTP settings used when creating the client
            dest_dir: Extraction directory (default: current working directory)
            install_dir: Optional directory the binary is moved into
            safe_paths: Reject archive entries escaping dest_dir
            platform_pair: (os, arch) override (default: running platform)
            client: Pre-built client, mainly for tests
        """
        self._config = config or ClientConfig()
        self._dest_dir = Path(dest_dir) if dest_dir else None
        self._install_dir = Path(install_dir) if install_dir else None
        self._safe_paths = safe_paths
        self._platform = platform_pair or current_platform()
        self._client = client

    @property
    def platform_pair(self) -> Tuple[str, str]:
        """(os, arch) used to pick release artifacts."""
        return self._platform

    def _get_client(self) -> GitHubClient:
        """Get or create GitHub client."""
        if self._client is None:
            self._client = GitHubClient(self._config)
        return self._client

    def download_link(self, target: DownloadTarget, version: str) -> str:
        """Download URL of a target's archive for the configured platform."""
        os_name, arch = self._platform
        return build_download_link(target, version, os_name, arch, host=self._config.host)

    def _make_executable(self, path: Path) -> None:
        if not path.is_file():
            raise ArchiveFilesystemError(
                str(path), "find binary", FileNotFoundError("not present in archive")
            )
        try:
            os.chmod(path, BINARY_MODE)
        except OSError as e:
            raise ArchiveFilesystemError(str(path), "set permissions on", e) from e

    def _install_binary(self, binary_path: Path) -> Path:
        """Move the binary into the install directory."""
        target = self._install_dir / binary_path.name
        try:
            self._install_dir.mkdir(parents=True, exist_ok=True)
            shutil.move(str(binary_path), str(target))
            os.chmod(target, BINARY_MODE)
        except OSError as e:
            raise ArchiveFilesystemError(str(target), "install binary to", e) from e
        logger.info(f"Installed {binary_path.name} to {target}")
        return target

    def install_version(self, target: DownloadTarget, version: str) -> InstallResult:
        """
        Download and unpack a specific release of a target.

        Args:
            target: Repository and binary to fetch
            version: Release tag to download

        Returns:
            InstallResult describing what was written

        Raises:
            ReleaseError: Any failure of download, extraction or install
        """
        url = self.download_link(target, version)
        dest_dir = self._dest_dir or Path.cwd()
        client = self._get_client()

        try:
            with client.open_download(url) as stream:
                try:
                    entries = extract_archive(stream, dest_dir, safe_paths=self._safe_paths)
                except (requests.exceptions.RequestException, urllib3.exceptions.HTTPError) as e:
                    raise ReleaseConnectionError(url, e) from e

            binary_path = dest_dir / target.binary
            self._make_executable(binary_path)

            installed_path = None
            if self._install_dir:
                installed_path = self._install_binary(binary_path)

        except ReleaseError as e:
            logger.error(f"Failed to install {target.repo} {version}: {e}")
            raise

        logger.info(f"Downloaded {target.repo} {version} into {dest_dir}")
        return InstallResult(
            repo=target.repo,
            version=version,
            download_url=url,
            extract_dir=dest_dir,
            binary_path=binary_path,
            entries=entries,
            installed_path=installed_path,
        )

    def install_latest(self, target: DownloadTarget) -> InstallResult:
        """
        Resolve the latest release of a target, then download and unpack it.

        The resolved tag is used for the whole cycle.

        Raises:
            ReleaseError: Any failure along the pipeline
        """
        try:
            version = self._get_client().resolve_latest_version(target.repo)
        except ReleaseError as e:
            logger.error(f"Failed to resolve latest release of {target.repo}: {e}")
            raise
        return self.install_version(target, version)

    def install_all(
        self,
        targets: Sequence[DownloadTarget],
        keep_going: bool = False
    ) -> Tuple[List[InstallResult], List[InstallFailure]]:
        """
        Run the pipeline for each target, one after another.

        Args:
            targets: Targets in processing order
            keep_going: Continue with the next target after a failure

        Returns:
            Tuple of (results, failures)

        Raises:
            ReleaseError: The first failure, unless keep_going is set
        """
        results: List[InstallResult] = []
        failures: List[InstallFailure] = []

        for target in targets:
            try:
                results.append(self.install_latest(target))
            except ReleaseError as e:
                if not keep_going:
                    raise
                failures.append(InstallFailure(target, e))

        if failures:
            logger.warning(f"{len(failures)} of {len(targets)} repositories failed")
        return results, failures

    def close(self) -> None:
        """Clean up resources."""
        if self._client:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ReleaseDownloader":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
