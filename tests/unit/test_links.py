"""Unit tests for release models and download link construction."""

import pytest
from unittest.mock import patch

from downrelease.updater.links import (
    build_archive_name,
    build_download_link,
    current_platform,
)
from downrelease.updater.release import (
    DownloadTarget,
    ReleaseMetadata,
    RepositoryIdentifier,
    strip_version_prefix,
)


NGO = RepositoryIdentifier("Guerrilla-Interactive", "ngo")


class TestRepositoryIdentifier:
    """Tests for RepositoryIdentifier."""

    def test_str(self):
        assert str(NGO) == "Guerrilla-Interactive/ngo"

    def test_parse(self):
        assert RepositoryIdentifier.parse("Guerrilla-Interactive/ngo") == NGO
        assert RepositoryIdentifier.parse(" /Guerrilla-Interactive/ngo/ ") == NGO

    @pytest.mark.parametrize("spec", ["ngo", "a/b/c", "/ngo", ""])
    def test_parse_invalid(self, spec):
        with pytest.raises(ValueError):
            RepositoryIdentifier.parse(spec)

    def test_empty_parts_rejected(self):
        with pytest.raises(ValueError):
            RepositoryIdentifier("", "ngo")

    def test_immutable(self):
        with pytest.raises(AttributeError):
            NGO.owner = "someone"


class TestDownloadTarget:
    """Tests for DownloadTarget."""

    def test_binary_defaults_to_repository_name(self):
        assert DownloadTarget.for_repository(NGO).binary == "ngo"

    def test_binary_override(self):
        assert DownloadTarget.for_repository(NGO, "ngo-cli").binary == "ngo-cli"


class TestReleaseMetadata:
    """Tests for ReleaseMetadata."""

    def test_from_api_response(self):
        metadata = ReleaseMetadata.from_api_response({
            "id": 42,
            "tag_name": "v1.1.0",
            "update_url": "/Guerrilla-Interactive/ngo/releases/v1.1.0",
            "update_authenticity_token": "abc",
            "delete_url": "/delete",
            "delete_authenticity_token": "def",
            "edit_url": "/edit",
        })

        assert metadata.id == 42
        assert metadata.tag_name == "v1.1.0"
        assert metadata.edit_url == "/edit"

    def test_missing_fields_default(self):
        metadata = ReleaseMetadata.from_api_response({"tag_name": None})

        assert metadata.id == 0
        assert metadata.tag_name == ""
        assert metadata.update_url == ""


class TestStripVersionPrefix:
    """Tests for strip_version_prefix."""

    @pytest.mark.parametrize("version,expected", [
        ("v1.1.0", "1.1.0"),
        ("1.1.0", "1.1.0"),
        ("vv1.0", "v1.0"),
        ("", ""),
    ])
    def test_strip(self, version, expected):
        assert strip_version_prefix(version) == expected


class TestBuildDownloadLink:
    """Tests for build_download_link."""

    def test_known_release_url(self):
        """Test the URL of a published ngo release."""
        url = build_download_link(DownloadTarget(NGO, "ngo"), "v1.1.0", "linux", "arm64")

        assert url == (
            "https://github.com/Guerrilla-Interactive/ngo/releases/download/"
            "v1.1.0/ngo_1.1.0_linux_arm64.tar.gz"
        )

    def test_deterministic(self):
        target = DownloadTarget(NGO, "ngo")
        first = build_download_link(target, "v2.0.0", "darwin", "amd64")
        second = build_download_link(target, "v2.0.0", "darwin", "amd64")
        assert first == second

    def test_prefixed_and_bare_versions_share_filename(self):
        """Test the tag segment stays raw while the filename is stripped."""
        target = DownloadTarget(NGO, "ngo")
        prefixed = build_download_link(target, "v1.1.0", "linux", "arm64")
        bare = build_download_link(target, "1.1.0", "linux", "arm64")

        assert prefixed.rsplit("/", 1)[1] == bare.rsplit("/", 1)[1] == "ngo_1.1.0_linux_arm64.tar.gz"
        assert "/download/v1.1.0/" in prefixed
        assert "/download/1.1.0/" in bare

    def test_platform_lowercased(self):
        assert build_archive_name("ngo", "v1.0.0", "Linux", "AMD64") == "ngo_1.0.0_linux_amd64.tar.gz"

    def test_custom_host(self):
        url = build_download_link(DownloadTarget(NGO, "ngo"), "v1.0.0", "linux", "amd64", host="ghe.example.com")
        assert url.startswith("https://ghe.example.com/Guerrilla-Interactive/ngo/")


class TestCurrentPlatform:
    """Tests for current_platform."""

    @pytest.mark.parametrize("system,machine,expected", [
        ("Linux", "x86_64", ("linux", "amd64")),
        ("Linux", "aarch64", ("linux", "arm64")),
        ("Darwin", "arm64", ("darwin", "arm64")),
        ("Windows", "AMD64", ("windows", "amd64")),
        ("Linux", "armv7l", ("linux", "arm")),
        ("SunOS", "sparc64", ("sunos", "sparc64")),
    ])
    def test_mapping(self, system, machine, expected):
        with patch("platform.system", return_value=system), \
                patch("platform.machine", return_value=machine):
            assert current_platform() == expected
