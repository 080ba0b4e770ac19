"""Command line interface for the boorusort project."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax

from boorusort.catalog import CatalogError
from boorusort.classification import ClassificationStatus
from boorusort.config import ConfigError, ConfigManager
from boorusort.identification import ResolutionKind, ResolutionMethod
from boorusort.organization import FilesystemError
from boorusort.service import FileOutcome, SortService

console = Console()

METHOD_LABELS = {
    ResolutionMethod.CACHE: "MD5 lookup (cached)",
    ResolutionMethod.HASH: "MD5 search",
    ResolutionMethod.VISUAL: "reverse search",
}

_LOG_FORMAT = "%(message)s"


def _configure_logging(level: str, *, verbose: bool = False) -> None:
    """Install a rich handler on stderr at the configured level.

    Args:
        level: Level name from the configuration.
        verbose: Force DEBUG output.
    """
    resolved = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.WARNING
    logging.basicConfig(
        level=resolved,
        format=_LOG_FORMAT,
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _handle_cli_error(message: str, *, original: Exception | None = None) -> None:
    """Surface an error as a click exception.

    Args:
        message: Human-readable error message.
        original: Original exception for chaining.

    Raises:
        click.ClickException: Always; click exits with status 1.
    """

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Conditionally print CLI output according to quiet/summary settings.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    important_modes = {"summary", "warning", "error"}
    if summary_only and mode not in important_modes:
        return

    console.print(message)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    """Return a consistent summary line for CLI commands."""

    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {root}: {parts}.[/green]"


def _split_paths(paths: tuple[str, ...]) -> tuple[list[Path], list[Path]]:
    """Separate directory arguments from config file arguments.

    Returns:
        tuple[list[Path], list[Path]]: Directories and config files in order.

    Raises:
        click.ClickException: On missing paths or more than two directories.
    """
    directories: list[Path] = []
    config_files: list[Path] = []
    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_dir():
            if len(directories) == 2:
                raise click.ClickException("Target and source paths are already set!")
            directories.append(path)
        elif path.is_file():
            config_files.append(path)
        else:
            raise click.ClickException(f"Path does not exist: {raw}")
    return directories, config_files


def _relative(path: Path, *roots: Path) -> str:
    for root in sorted(roots, key=lambda value: len(value.parts), reverse=True):
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            continue
    return str(path)


def _describe_resolution(outcome: FileOutcome) -> Optional[str]:
    resolution = outcome.resolution
    if resolution is None:
        return None
    if resolution.kind is ResolutionKind.FOUND and resolution.method is not None:
        return f"Found using {METHOD_LABELS[resolution.method]}"
    if resolution.kind is ResolutionKind.MULTIPLE_MATCHES:
        return "[yellow]Multiple posts matched![/yellow]"
    if resolution.kind is ResolutionKind.API_ERROR:
        return f"[red]{resolution.message}[/red]"
    return f"Post by MD5 not found: {outcome.file_hash}"


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="boorusort")
def cli() -> None:
    """boorusort sorts local images into folders using image-board metadata."""


@cli.command("sort")
@click.argument("paths", nargs=-1, type=click.Path(path_type=str))
@click.option(
    "--reverse-search/--no-reverse-search",
    default=None,
    help="Fall back to visual search for files not found by MD5.",
)
@click.option(
    "--posts-dump",
    type=click.Path(dir_okay=False, path_type=str),
    help="Load posts from a JSON dump instead of bulk lookups.",
)
@click.option(
    "--save-dump",
    type=click.Path(dir_okay=False, path_type=str),
    help="Write every fetched post to a JSON dump after the run.",
)
@click.option("--dry-run", is_flag=True, help="Preview moves without modifying files.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def sort_command(
    ctx: click.Context,
    paths: tuple[str, ...],
    reverse_search: Optional[bool],
    posts_dump: Optional[str],
    save_dump: Optional[str],
    dry_run: bool,
    summary_mode: bool,
    quiet: bool,
    verbose: bool,
) -> None:
    """Sort the images of a directory into classified folders.

    PATHS holds up to two directories (TARGET, or SOURCE TARGET) and any
    number of YAML config files layered over the default configuration.

    Args:
        ctx: Click context used for parameter source inspection.
        paths: Directories and config files.
        reverse_search: Explicit visual search choice; prompts when unset.
        posts_dump: Posts dump to load before the run.
        save_dump: Destination for a posts dump written after the run.
        dry_run: If True, skip making filesystem mutations.
        summary_mode: When True, limit output to summary lines and warnings.
        quiet: When True, suppress non-error CLI output entirely.
        verbose: When True, log at DEBUG level.

    Raises:
        click.ClickException: If arguments, configuration or the filesystem fail.
    """
    directories, config_files = _split_paths(paths)

    overrides: dict[str, Any] = {}
    if reverse_search is not None:
        overrides["processing.reverse_search"] = reverse_search
    if posts_dump:
        overrides["processing.posts_dump"] = posts_dump

    manager = ConfigManager()
    try:
        config = manager.load(extra_files=config_files, cli_overrides=overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), original=exc)
        return

    _configure_logging(config.logging.level, verbose=verbose)

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default
    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )

    if not directories:
        entered = click.prompt("Please enter target path", default=str(Path.cwd()))
        target = Path(entered.strip()).expanduser()
        if not target.is_dir():
            raise click.ClickException("Invalid path!")
        directories.append(target)

    source_root = directories[0].resolve()
    target_root = directories[-1].resolve()
    _emit_message(
        f"Using target path: {target_root}",
        mode="detail",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )
    if source_root != target_root:
        _emit_message(
            f"Using source path: {source_root}",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    use_reverse_search = config.processing.reverse_search
    if use_reverse_search is None:
        use_reverse_search = click.confirm("Use reverse search?", default=True)

    service = SortService(config, reverse_search=use_reverse_search)
    with service.client:
        if config.processing.posts_dump:
            try:
                loaded = service.load_posts_dump(Path(config.processing.posts_dump).expanduser())
            except CatalogError as exc:
                _handle_cli_error(str(exc), original=exc)
                return
            _emit_message(
                f"Loaded {loaded} posts from dump.",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

        files = service.discover(source_root)
        _emit_message(
            f"Found {len(files)} files.",
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

        def _report(outcome: FileOutcome) -> None:
            _emit_message(
                f"[{outcome.index}/{outcome.total}] File: {outcome.path.name}",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
            described = _describe_resolution(outcome)
            if described:
                _emit_message(
                    described, mode="detail", quiet=quiet_enabled, summary_only=summary_only
                )
            if outcome.error is not None:
                _emit_message(
                    f"[red]{outcome.path.name}: {outcome.error}[/red]",
                    mode="error",
                    quiet=quiet_enabled,
                    summary_only=summary_only,
                )
                return
            operation = outcome.operation
            if operation is None:
                return
            verb = "Would move" if dry_run else "Move"
            line = (
                f'{verb}: "{_relative(operation.source, source_root)}" => '
                f'"{_relative(operation.destination, source_root, target_root)}"'
            )
            mode = "detail"
            if operation.status is not ClassificationStatus.RESOLVED:
                line = f"[yellow]{line}[/yellow]"
                mode = "warning"
            _emit_message(line, mode=mode, quiet=quiet_enabled, summary_only=summary_only)

        status_context = (
            contextlib.nullcontext()
            if quiet_enabled or summary_only
            else console.status("Sorting files...", spinner="dots")
        )
        try:
            with status_context:
                report = service.run(
                    source_root, target_root, dry_run=dry_run, files=files, on_file=_report
                )
        except FilesystemError as exc:
            _handle_cli_error(str(exc), original=exc)
            return

        if save_dump:
            written = service.save_posts_dump(Path(save_dump).expanduser())
            _emit_message(
                f"Saved {written} posts to {save_dump}.",
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )

    metrics = dict(report.counts)
    metrics["requests"] = report.request_count
    metrics["dry_run"] = dry_run
    _emit_message(
        _format_summary_line("Sort", target_root, metrics),
        mode="summary",
        quiet=quiet_enabled,
        summary_only=summary_only,
    )


@cli.group()
def config() -> None:
    """Manage boorusort configuration files and overrides."""


@config.command("view")
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(files: tuple[Path, ...], no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Args:
        files: Extra YAML config files layered over the default file.
        no_env: If True, ignore environment-derived overrides.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    manager = ConfigManager()
    try:
        config = manager.load(extra_files=files, include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
