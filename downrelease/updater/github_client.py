"""GitHub client for release resolution and artifact download.

Resolves the latest release tag of a repository through the
``releases/latest`` endpoint and opens release artifacts as streams.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional

import requests

from downrelease.updater.exceptions import (
    ReleaseConnectionError,
    ReleaseDecodeError,
    ReleaseError,
    ReleaseNotFoundError,
    ReleaseRateLimitError,
)
from downrelease.updater.links import DEFAULT_HOST
from downrelease.updater.release import ReleaseMetadata, RepositoryIdentifier

logger = logging.getLogger("downrelease.github_client")


# Request timeout in seconds
REQUEST_TIMEOUT = 10

USER_AGENT = "downrelease/1.0"

# Fields that must have this type when present and not null
FIELD_TYPES = {
    "id": int,
    "tag_name": str,
}


def _check_field_types(url: str, data: dict) -> None:
    """Raise ReleaseDecodeError if a known field has the wrong JSON type."""
    for name, expected in FIELD_TYPES.items():
        value = data.get(name)
        # type() rather than isinstance(): true is not a release id
        if value is not None and type(value) is not expected:
            raise ReleaseDecodeError(
                url, TypeError(f"{name} must be {expected.__name__}, got {type(value).__name__}")
            )


@dataclass
class ClientConfig:
    """HTTP settings shared by version resolution and artifact download."""
    host: str = DEFAULT_HOST
    timeout: float = REQUEST_TIMEOUT
    retries: int = 0
    token: Optional[str] = None
    user_agent: str = USER_AGENT

    def latest_release_url(self, repo: RepositoryIdentifier) -> str:
        """URL of the latest-release endpoint for a repository."""
        return f"https://{self.host}/{repo.owner}/{repo.name}/releases/latest"


class GitHubClient:
    """Client for resolving and downloading GitHub releases."""

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize GitHub client.

        Args:
            config: HTTP settings (default: ClientConfig())
            session: Optional pre-built session, mainly for tests
        """
        self._config = config or ClientConfig()
        self._session = session or requests.Session()
        self._session.headers.update({"User-Agent": self._config.user_agent})
        if self._config.token:
            self._session.headers["Authorization"] = f"Bearer {self._config.token}"

    @property
    def config(self) -> ClientConfig:
        """HTTP settings in use."""
        return self._config

    def _get(self, url: str, what: str, **kwargs) -> requests.Response:
        """
        GET a URL, translating transport and HTTP status failures.

        Transport errors are retried up to config.retries times.

        Raises:
            ReleaseConnectionError: If unable to connect or timed out
            ReleaseRateLimitError: If rate limit exceeded
            ReleaseNotFoundError: If the resource does not exist
            ReleaseError: For other HTTP errors
        """
        attempts = self._config.retries + 1
        for attempt in range(1, attempts + 1):
            try:
                logger.debug(f"GET {url} (attempt {attempt}/{attempts})")
                response = self._session.get(url, timeout=self._config.timeout, **kwargs)
                break
            except (requests.exceptions.Timeout, requests.exceptions.ConnectionError) as e:
                logger.warning(f"Request to {url} failed: {e}")
                if attempt == attempts:
                    raise ReleaseConnectionError(url, e) from e
            except requests.exceptions.RequestException as e:
                logger.error(f"Request error for {url}: {e}")
                raise ReleaseError(f"Request failed for {url}", e) from e

        if response.status_code == 200:
            return response

        status = response.status_code
        body = response.text if status in (403, 429) else ""
        response.close()
        if status == 404:
            raise ReleaseNotFoundError(what, url)
        if "rate limit" in (body or "").lower():
            raise ReleaseRateLimitError(url)
        raise ReleaseError(f"HTTP {status} from {url}")

    def get_latest_release(self, repo: RepositoryIdentifier) -> ReleaseMetadata:
        """
        Fetch metadata of the latest release.

        Args:
            repo: Repository to query

        Returns:
            ReleaseMetadata decoded from the response body

        Raises:
            ReleaseDecodeError: If the body is not a JSON object or id/tag_name
                have the wrong type
            ReleaseConnectionError, ReleaseNotFoundError, ReleaseError:
                see _get
        """
        url = self._config.latest_release_url(repo)
        logger.info(f"Resolving latest release of {repo}")

        response = self._get(url, f"Latest release of {repo}", headers={"Accept": "application/json"})
        try:
            data = response.json()
        except ValueError as e:
            raise ReleaseDecodeError(url, e) from e
        if not isinstance(data, dict):
            raise ReleaseDecodeError(url, TypeError(f"expected object, got {type(data).__name__}"))
        _check_field_types(url, data)

        return ReleaseMetadata.from_api_response(data)

    def resolve_latest_version(self, repo: RepositoryIdentifier) -> str:
        """
        Resolve the tag of the latest release.

        Args:
            repo: Repository to query

        Returns:
            Version tag, e.g. "v1.1.0"

        Raises:
            ReleaseNotFoundError: If no release or an empty tag is returned
            ReleaseDecodeError: If the body cannot be decoded
            ReleaseConnectionError: If unable to connect
        """
        metadata = self.get_latest_release(repo)
        if not metadata.tag_name:
            raise ReleaseNotFoundError(
                f"Release tag of {repo}", self._config.latest_release_url(repo)
            )

        logger.info(f"Latest release of {repo}: {metadata.tag_name}")
        return metadata.tag_name

    @contextmanager
    def open_download(self, url: str) -> Iterator[BinaryIO]:
        """
        Open a release artifact as a readable byte stream.

        The response body is streamed; nothing is buffered up front.

        Args:
            url: Artifact download URL

        Yields:
            Raw binary stream of the response body

        Raises:
            ReleaseNotFoundError: If the artifact does not exist
            ReleaseConnectionError: If unable to connect
            ReleaseError: For other HTTP errors
        """
        logger.info(f"Downloading {url}")
        response = self._get(url, "Release artifact", stream=True)
        try:
            response.raw.decode_content = True
            yield response.raw
        finally:
            response.close()

    def close(self) -> None:
        """Close the HTTP session."""
        self._session.close()

    def __enter__(self) -> "GitHubClient":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.close()
