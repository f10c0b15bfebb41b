"""
Standard exit codes for downrelease commands.

Following Unix/POSIX conventions for command-line tools.
"""
from downrelease.updater.exceptions import (
    ArchiveError,
    ReleaseConnectionError,
    ReleaseDecodeError,
    ReleaseError,
    ReleaseNotFoundError,
)

SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

NOT_FOUND = 64           # Repository, release or artifact not found
API_ERROR = 65           # Release host returned an error
NETWORK_ERROR = 68       # Network connection failed
DATA_ERROR = 70          # Malformed metadata or archive
PARTIAL_SUCCESS = 71     # Some repositories succeeded, some failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Map an exception to an exit code.

    Args:
        exc: The exception that ended the command

    Returns:
        Exit code
    """
    if isinstance(exc, KeyboardInterrupt):
        return INTERRUPTED
    if isinstance(exc, ReleaseNotFoundError):
        return NOT_FOUND
    if isinstance(exc, ReleaseConnectionError):
        return NETWORK_ERROR
    if isinstance(exc, (ReleaseDecodeError, ArchiveError)):
        return DATA_ERROR
    # Rate limits and unexpected HTTP statuses
    if isinstance(exc, ReleaseError):
        return API_ERROR
    return GENERAL_ERROR
