"""Command-line entry point for downrelease.

Wires settings, credentials and the release downloader together and
decides how failures end the run.
"""

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import click

from . import exit_codes
from .config.credentials import CredentialManager
from .config.paths import get_log_file_path
from .config.settings import AppSettings, SettingsError, SettingsManager
from .updater.downloader import ReleaseDownloader
from .updater.exceptions import ReleaseError
from .updater.github_client import ClientConfig, GitHubClient
from .updater.links import build_download_link, current_platform
from .updater.release import DownloadTarget, RepositoryIdentifier
from .utils.logging import get_logger, level_for_verbosity, redact, setup_logging
from .utils.validators import (
    validate_binary_name,
    validate_repository,
    validate_retries,
    validate_timeout,
)

logger = get_logger("downrelease.cli")


@dataclass
class CliState:
    """Objects shared by all subcommands."""
    settings_manager: SettingsManager
    settings: AppSettings
    credentials: CredentialManager

    def client_config(
        self,
        timeout: Optional[float] = None,
        retries: Optional[int] = None
    ) -> ClientConfig:
        """Build HTTP settings from saved settings plus overrides."""
        return ClientConfig(
            host=self.settings.host,
            timeout=timeout if timeout is not None else self.settings.timeout,
            retries=retries if retries is not None else self.settings.retries,
            token=self.credentials.get_token(self.settings.host),
        )


def _fail(operation: str, error: Exception) -> None:
    """Print a diagnostic and exit with the matching code."""
    click.echo(redact(f"error: {operation}: {error}"), err=True)
    sys.exit(exit_codes.get_exit_code_for_exception(error))


def _parse_repository(value: str) -> RepositoryIdentifier:
    is_valid, error = validate_repository(value)
    if not is_valid:
        raise click.BadParameter(error)
    return RepositoryIdentifier.parse(value)


def _check(result: Tuple[bool, Optional[str]], param: str) -> None:
    is_valid, error = result
    if not is_valid:
        raise click.BadParameter(error, param_hint=param)


def _platform_pair(os_name: Optional[str], arch: Optional[str]) -> Tuple[str, str]:
    running_os, running_arch = current_platform()
    return os_name or running_os, arch or running_arch


@click.group()
@click.version_option(package_name="downrelease")
@click.option("-v", "--verbose", count=True, help="More output on stderr (-v info, -vv debug).")
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Settings file (default: platform config directory).",
)
@click.option("--log-file/--no-log-file", default=True, help="Also write a log file.")
@click.pass_context
def cli(ctx: click.Context, verbose: int, config_path: Optional[Path], log_file: bool):
    """downrelease - Fetch and unpack the latest release of a GitHub project."""
    level = level_for_verbosity(verbose)
    try:
        setup_logging(level=level, log_file=get_log_file_path() if log_file else None)
    except OSError as e:
        setup_logging(level=level)
        logger.warning(f"Log file disabled: {e}")

    settings_manager = SettingsManager(config_path=config_path)
    ctx.obj = CliState(
        settings_manager=settings_manager,
        settings=settings_manager.load(),
        credentials=CredentialManager(),
    )


@cli.command()
@click.argument("repos", nargs=-1)
@click.option("--binary", help="Binary name inside the archive (single repository only).")
@click.option(
    "--dest", "dest_dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Extraction directory (default: current directory).",
)
@click.option(
    "--install-dir",
    type=click.Path(file_okay=False, path_type=Path),
    help="Move the binary into this directory after extraction.",
)
@click.option("--timeout", type=float, help="Network timeout in seconds.")
@click.option("--retries", type=int, help="Retries on connection failures.")
@click.option("--keep-going/--fail-fast", default=None, help="Continue after a failed repository.")
@click.option("--unsafe-paths", is_flag=True, help="Allow archive entries outside the target directory.")
@click.option("--os", "os_name", help="Override the target operating system.")
@click.option("--arch", help="Override the target architecture.")
@click.pass_obj
def fetch(
    state: CliState,
    repos: Tuple[str, ...],
    binary: Optional[str],
    dest_dir: Optional[Path],
    install_dir: Optional[Path],
    timeout: Optional[float],
    retries: Optional[int],
    keep_going: Optional[bool],
    unsafe_paths: bool,
    os_name: Optional[str],
    arch: Optional[str],
):
    """Download and unpack the latest release of REPOS (owner/name)."""
    settings = state.settings
    repo_specs = list(repos) or settings.repositories
    if not repo_specs:
        raise click.UsageError("No repositories given and none configured")

    if timeout is not None:
        _check(validate_timeout(timeout), "--timeout")
    if retries is not None:
        _check(validate_retries(retries), "--retries")
    if binary is not None:
        if len(repo_specs) > 1:
            raise click.BadParameter("only valid with a single repository", param_hint="--binary")
        _check(validate_binary_name(binary), "--binary")

    targets: List[DownloadTarget] = [
        DownloadTarget.for_repository(_parse_repository(spec), binary)
        for spec in repo_specs
    ]
    if keep_going is None:
        keep_going = settings.keep_going

    downloader = ReleaseDownloader(
        config=state.client_config(timeout, retries),
        dest_dir=dest_dir,
        install_dir=install_dir or settings.install_dir or None,
        safe_paths=settings.safe_paths and not unsafe_paths,
        platform_pair=_platform_pair(os_name, arch),
    )

    with downloader:
        try:
            results, failures = downloader.install_all(targets, keep_going=keep_going)
        except (ReleaseError, KeyboardInterrupt) as e:
            _fail("fetch", e)

    for result in results:
        click.echo(f"{result.repo}\n{result.download_url}")
        logger.info(f"{result.repo} {result.version} -> {result.final_path}")

    if failures:
        for failure in failures:
            click.echo(redact(f"error: fetch {failure.target.repo}: {failure.error}"), err=True)
        if results:
            sys.exit(exit_codes.PARTIAL_SUCCESS)
        sys.exit(exit_codes.get_exit_code_for_exception(failures[0].error))


@cli.command()
@click.argument("repo")
@click.option("--timeout", type=float, help="Network timeout in seconds.")
@click.pass_obj
def latest(state: CliState, repo: str, timeout: Optional[float]):
    """Print the latest release tag of REPO (owner/name)."""
    repository = _parse_repository(repo)
    if timeout is not None:
        _check(validate_timeout(timeout), "--timeout")

    with GitHubClient(state.client_config(timeout)) as client:
        try:
            version = client.resolve_latest_version(repository)
        except (ReleaseError, KeyboardInterrupt) as e:
            _fail(f"resolve {repository}", e)
    click.echo(version)


@cli.command()
@click.argument("repo")
@click.argument("version")
@click.option("--binary", help="Binary name inside the archive (default: repository name).")
@click.option("--os", "os_name", help="Override the target operating system.")
@click.option("--arch", help="Override the target architecture.")
@click.pass_obj
def link(
    state: CliState,
    repo: str,
    version: str,
    binary: Optional[str],
    os_name: Optional[str],
    arch: Optional[str],
):
    """Print the download URL of REPO's VERSION archive without fetching it."""
    if binary is not None:
        _check(validate_binary_name(binary), "--binary")
    target = DownloadTarget.for_repository(_parse_repository(repo), binary)
    target_os, target_arch = _platform_pair(os_name, arch)
    click.echo(build_download_link(target, version, target_os, target_arch, host=state.settings.host))


@cli.group("config")
def config_cmd():
    """Inspect or change saved settings."""
    pass


@config_cmd.command("show")
@click.pass_obj
def config_show(state: CliState):
    """Print settings as JSON."""
    click.echo(json.dumps(state.settings.to_dict(), indent=2))


@config_cmd.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_obj
def config_set(state: CliState, key: str, value: str):
    """Set KEY to VALUE (lists are comma-separated)."""
    try:
        parsed = AppSettings.parse_value(key, value)
    except SettingsError as e:
        raise click.BadParameter(str(e), param_hint="KEY VALUE")

    state.settings = state.settings_manager.update(**{key: parsed})
    click.echo(f"{key} = {json.dumps(parsed)}")


@config_cmd.command("reset")
@click.pass_obj
def config_reset(state: CliState):
    """Restore default settings."""
    state.settings = state.settings_manager.reset()
    click.echo("Settings reset to defaults")


@cli.group("token")
def token_cmd():
    """Manage the access token stored in the system keyring."""
    pass


@token_cmd.command("set")
@click.password_option("--token", prompt="Access token", confirmation_prompt=False)
@click.pass_obj
def token_set(state: CliState, token: str):
    """Store an access token for the configured host."""
    host = state.settings.host
    if not state.credentials.save_token(host, token):
        click.echo(f"error: token set: keyring unavailable for {host}", err=True)
        sys.exit(exit_codes.GENERAL_ERROR)
    click.echo(f"Token saved for {host}")


@token_cmd.command("clear")
@click.pass_obj
def token_clear(state: CliState):
    """Remove the stored access token."""
    host = state.settings.host
    if state.credentials.delete_token(host):
        click.echo(f"Token removed for {host}")
    else:
        click.echo(f"No token stored for {host}")


@token_cmd.command("status")
@click.pass_obj
def token_status(state: CliState):
    """Show where the token for the configured host comes from."""
    host = state.settings.host
    source = state.credentials.token_source(host)
    if source is None:
        click.echo(f"No token for {host}; requests are anonymous")
    else:
        click.echo(f"Token for {host} from {source}")


def main() -> int:
    """
    Application entry point.

    Returns:
        Exit code (0 for success)
    """
    return cli.main(prog_name="downrelease", standalone_mode=True)


if __name__ == "__main__":
    sys.exit(main())
