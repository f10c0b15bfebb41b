"""Access token lookup and storage for downrelease.

A token for a release host is taken from the environment first and
from the system keyring second. Only keyring entries are managed here;
environment tokens are read-only.
"""

import os
from typing import Mapping, Optional

import keyring
from keyring.errors import KeyringError

from downrelease.updater.links import DEFAULT_HOST


# Applies to every host
TOKEN_ENV_VAR = "DOWNRELEASE_TOKEN"
# Applies to github.com only, matching the gh CLI and Actions runners
GITHUB_TOKEN_ENV_VAR = "GITHUB_TOKEN"

SOURCE_ENVIRONMENT = "environment"
SOURCE_KEYRING = "keyring"


class CredentialManager:
    """Per-host access tokens from the environment or the system keyring."""

    SERVICE_NAME = "downrelease"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Args:
            environ: Environment to read tokens from (default: os.environ)
        """
        self._environ = os.environ if environ is None else environ

    @staticmethod
    def _make_key(host: str) -> str:
        return f"token:{host.lower()}"

    def _environment_token(self, host: str) -> Optional[str]:
        token = self._environ.get(TOKEN_ENV_VAR)
        if not token and host.lower() == DEFAULT_HOST:
            token = self._environ.get(GITHUB_TOKEN_ENV_VAR)
        return token or None

    def get_stored_token(self, host: str) -> Optional[str]:
        """Token saved in the keyring for host, or None if absent or unavailable."""
        try:
            return keyring.get_password(self.SERVICE_NAME, self._make_key(host))
        except KeyringError:
            return None

    def get_token(self, host: str) -> Optional[str]:
        """
        Token to authenticate requests to host.

        Returns:
            Environment token if set, else the keyring token, else None
        """
        return self._environment_token(host) or self.get_stored_token(host)

    def token_source(self, host: str) -> Optional[str]:
        """Where get_token(host) finds its token: "environment", "keyring" or None."""
        if self._environment_token(host):
            return SOURCE_ENVIRONMENT
        if self.get_stored_token(host):
            return SOURCE_KEYRING
        return None

    def save_token(self, host: str, token: str) -> bool:
        """
        Store a token for host in the keyring.

        Returns:
            True if stored, False if the keyring is unavailable
        """
        try:
            keyring.set_password(self.SERVICE_NAME, self._make_key(host), token)
        except KeyringError:
            return False
        return True

    def delete_token(self, host: str) -> bool:
        """
        Remove the keyring token for host.

        Returns:
            True if a token was removed
        """
        try:
            keyring.delete_password(self.SERVICE_NAME, self._make_key(host))
        except KeyringError:
            return False
        return True
