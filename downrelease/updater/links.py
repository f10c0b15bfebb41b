"""Download link construction for release artifacts.

Release archives follow the goreleaser naming convention
``{binary}_{version}_{os}_{arch}.tar.gz`` with Go-style platform names.
"""

import platform
from typing import Tuple

from downrelease.updater.release import DownloadTarget, strip_version_prefix


DEFAULT_HOST = "github.com"
ARCHIVE_EXTENSION = ".tar.gz"

# platform.system() -> GOOS
OS_MAP = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
    "freebsd": "freebsd",
}

# platform.machine() -> GOARCH
ARCH_MAP = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
}


def current_platform() -> Tuple[str, str]:
    """
    Get the OS/architecture pair of the running machine.

    Returns:
        Tuple of (os, arch) using Go-style identifiers, e.g. ("linux", "amd64").
        Unknown values are passed through lower-cased.
    """
    system = platform.system().lower()
    machine = platform.machine().lower()
    return OS_MAP.get(system, system), ARCH_MAP.get(machine, machine)


def build_archive_name(binary: str, version: str, os_name: str, arch: str) -> str:
    """Filename of the release archive for a platform."""
    return (
        f"{binary}_{strip_version_prefix(version)}_"
        f"{os_name.lower()}_{arch.lower()}{ARCHIVE_EXTENSION}"
    )


def build_download_link(
    target: DownloadTarget,
    version: str,
    os_name: str,
    arch: str,
    host: str = DEFAULT_HOST
) -> str:
    """
    Build the download URL of a release archive.

    The tag path segment keeps the version exactly as given, while the
    filename embeds it without the leading 'v'.

    Args:
        target: Repository and binary to download
        version: Release tag (e.g. "v1.1.0")
        os_name: Target operating system (e.g. "linux")
        arch: Target architecture (e.g. "arm64")
        host: Release host

    Returns:
        Full download URL
    """
    filename = build_archive_name(target.binary, version, os_name, arch)
    return (
        f"https://{host}/{target.repo.owner}/{target.repo.name}"
        f"/releases/download/{version}/{filename}"
    )
