"""Release and archive exceptions for downrelease.

Custom exception hierarchy for release resolution, download and
extraction so callers can decide how to react to each failure class.
"""


class ReleaseError(Exception):
    """Base exception for all release pipeline errors."""

    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error

    def __str__(self) -> str:
        if self.original_error:
            return f"{self.message}: {self.original_error}"
        return self.message


class ReleaseConnectionError(ReleaseError):
    """Transport failure (DNS, connect, timeout) talking to the release host."""

    def __init__(self, url: str, original_error: Exception = None):
        self.url = url
        message = f"Unable to reach {url}"
        super().__init__(message, original_error)


class ReleaseRateLimitError(ReleaseError):
    """The release host refused the request because of rate limiting."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(f"Rate limit exceeded requesting {url}")


class ReleaseNotFoundError(ReleaseError):
    """Repository, release or artifact does not exist."""

    def __init__(self, what: str, url: str):
        self.what = what
        self.url = url
        super().__init__(f"{what} not found at {url}")


class ReleaseDecodeError(ReleaseError):
    """Latest-release response body could not be decoded."""

    def __init__(self, url: str, original_error: Exception = None):
        self.url = url
        message = f"Malformed release metadata from {url}"
        super().__init__(message, original_error)


class ArchiveError(ReleaseError):
    """Base exception for archive extraction failures."""
    pass


class ArchiveFormatError(ArchiveError):
    """Invalid gzip or tar framing."""

    def __init__(self, operation: str, original_error: Exception = None):
        self.operation = operation
        super().__init__(f"Invalid archive ({operation})", original_error)


class ArchiveFilesystemError(ArchiveError):
    """Filesystem operation failed while applying an archive entry."""

    def __init__(self, path: str, operation: str, original_error: Exception = None):
        self.path = path
        self.operation = operation
        message = f"Failed to {operation} '{path}'"
        super().__init__(message, original_error)


class UnsupportedEntryError(ArchiveError):
    """Archive entry is neither a directory nor a regular file."""

    def __init__(self, path: str, type_flag: bytes):
        self.path = path
        self.type_flag = type_flag
        super().__init__(f"Unsupported entry type {type_flag!r} for '{path}'")


class UnsafeEntryPathError(ArchiveError):
    """Archive entry path is absolute or escapes the extraction directory."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Refusing to extract '{path}': path escapes target directory")
