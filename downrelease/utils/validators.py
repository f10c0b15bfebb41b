"""Input validators for downrelease.

Provides validation functions for repository specs, binary names
and network settings given on the command line or in settings.
"""

import re
from typing import Optional, Tuple


# GitHub owner/repository names: letters, digits, '-', '_' and '.'
REPO_PART_PATTERN = re.compile(r'^[A-Za-z0-9_.-]+$')

# Hostname pattern (simplified)
HOSTNAME_PATTERN = re.compile(
    r'^(?=.{1,253}$)(?!-)[A-Za-z0-9-]{1,63}(?<!-)(\.[A-Za-z0-9-]{1,63})*$'
)


def validate_repository(spec: str) -> Tuple[bool, Optional[str]]:
    """
    Validate an 'owner/name' repository spec.

    Args:
        spec: Repository string to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not spec or not spec.strip():
        return False, "Repository is required"

    parts = spec.strip().strip("/").split("/")
    if len(parts) != 2:
        return False, f"Repository must be owner/name, got: {spec}"

    for part in parts:
        if not REPO_PART_PATTERN.match(part) or part in (".", ".."):
            return False, f"Invalid repository name: {spec}"

    return True, None


def validate_release_host(host: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a release host such as github.com or ghe.example.com:8443.

    The host is used as the authority of https:// URLs, so schemes and
    paths are rejected.

    Args:
        host: Hostname with optional port

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not host or not host.strip():
        return False, "Host is required"

    host = host.strip()
    if "://" in host or "/" in host:
        return False, f"Host must not include a scheme or path: {host}"

    hostname, _, port = host.partition(":")
    if not HOSTNAME_PATTERN.match(hostname):
        return False, f"Invalid hostname format: {hostname}"
    if port and (not port.isdigit() or not 1 <= int(port) <= 65535):
        return False, f"Port must be between 1 and 65535, got {port}"

    return True, None


def validate_binary_name(name: str) -> Tuple[bool, Optional[str]]:
    """
    Validate the name of the binary expected inside an archive.

    Args:
        name: Binary file name

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not name or not name.strip():
        return False, "Binary name is required"

    if "/" in name or "\\" in name or name in (".", ".."):
        return False, f"Binary name must be a plain file name, got: {name}"

    return True, None


def validate_timeout(timeout) -> Tuple[bool, Optional[str]]:
    """
    Validate a timeout value in seconds.

    Args:
        timeout: Timeout in seconds

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        timeout = float(timeout)
    except (ValueError, TypeError):
        return False, "Timeout must be a number"

    if not 1 <= timeout <= 300:
        return False, f"Timeout must be between 1 and 300 seconds, got {timeout:g}"

    return True, None


def validate_retries(retries) -> Tuple[bool, Optional[str]]:
    """
    Validate a retry count.

    Args:
        retries: Number of retries after the first attempt

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(retries, int):
        try:
            retries = int(retries)
        except (ValueError, TypeError):
            return False, "Retries must be a number"

    if retries < 0 or retries > 10:
        return False, f"Retries must be between 0 and 10, got {retries}"

    return True, None
