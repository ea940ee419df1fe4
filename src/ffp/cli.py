"""Command line interface for ffp."""

from __future__ import annotations

import difflib
from pathlib import Path
from typing import Any

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from ffp.config import ConfigError, ConfigManager, FfpConfig
from ffp.fingerprint import (
    DigestEngine,
    DirectoryWalker,
    FileCollector,
    FingerprintError,
    FingerprintPipeline,
    FingerprintResult,
    SampleStrategy,
    supported_algorithms,
)
from ffp.log import configure_logging

console = Console()


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    details: Any | None = None,
    original: Exception | None = None,
) -> None:
    """Emit a standardized error and terminate the command.

    Args:
        message: Human-readable error message.
        code: Machine-readable error identifier.
        json_output: Indicates whether JSON mode is active.
        details: Optional structured details to include in the payload.
        original: Original exception for chaining when not using JSON.

    Raises:
        SystemExit: When emitting JSON output to terminate the command.
        click.ClickException: For non-JSON flows to surface the error.
    """

    if json_output:
        payload: dict[str, Any] = {"error": {"code": code, "message": message}}
        if details is not None:
            payload["error"]["details"] = details
        console.print_json(data=payload)
        raise SystemExit(1)

    if isinstance(original, click.ClickException):
        raise original

    raise click.ClickException(message) from original


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    """Print ``message`` unless quiet or summary-only settings suppress its mode.

    Args:
        message: Renderable or string to emit.
        mode: Output mode identifier (`detail`, `summary`, `warning`, or `error`).
        quiet: Whether quiet mode is active.
        summary_only: Whether only summary lines should be emitted.
    """

    if quiet and mode != "error":
        return

    if summary_only and mode not in {"summary", "warning", "error"}:
        return

    console.print(message, soft_wrap=True)


def _format_summary_line(command: str, root: Path | str, metrics: dict[str, Any]) -> str:
    parts = ", ".join(f"{key}={value}" for key, value in metrics.items())
    return f"[green]{command} summary for {escape(str(root))}: {parts}.[/green]"


def _format_bytes(size: int) -> str:
    value = float(size)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if value < 1024 or unit == "TiB":
            return f"{int(value)} {unit}" if unit == "B" else f"{value:.1f} {unit}"
        value /= 1024
    return f"{size} B"


def _build_histogram_table(result: FingerprintResult) -> Table:
    """Return a table of file counts per power-of-two size bucket."""
    table = Table(title="File size distribution")
    table.add_column("Size up to", justify="right")
    table.add_column("Files", justify="right")
    for bound, count in sorted(result.histogram.items()):
        table.add_row(_format_bytes(bound), str(count))
    for strategy in SampleStrategy:
        table.add_section()
        table.add_row(f"strategy: {strategy.value}", str(result.strategies.get(strategy, 0)))
    return table


def _emit_failures(result: FingerprintResult, *, quiet: bool, summary_only: bool) -> None:
    if not result.failures:
        return
    _emit_message("[red]Errors encountered:[/red]", mode="error", quiet=quiet, summary_only=summary_only)
    for failure in result.failures:
        _emit_message(
            escape(f"  - [{failure.kind}] {failure.path}: {failure.message}"),
            mode="error",
            quiet=quiet,
            summary_only=summary_only,
        )


def _collect_scan_overrides(
    *,
    window_size: int | None,
    algorithm: str | None,
    sort_entries: bool | None,
    follow_symlinks: bool | None,
    workers: int | None,
) -> dict[str, Any]:
    candidates = {
        "fingerprint.window_size": window_size,
        "fingerprint.algorithm": algorithm,
        "fingerprint.sort_entries": sort_entries,
        "fingerprint.follow_symlinks": follow_symlinks,
        "fingerprint.workers": workers,
    }
    return {key: value for key, value in candidates.items() if value is not None}


def build_pipeline(config: FfpConfig) -> FingerprintPipeline:
    """Assemble a fingerprint pipeline from the effective configuration."""
    settings = config.fingerprint
    return FingerprintPipeline(
        walker=DirectoryWalker(follow_symlinks=settings.follow_symlinks),
        collector=FileCollector(
            DigestEngine(settings.algorithm),
            settings.window_size,
            workers=settings.workers,
        ),
        sort_entries=settings.sort_entries,
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="ffp")
def cli() -> None:
    """ffp computes fast, content-derived fingerprints of directory trees."""


@cli.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=str))
@click.option("-s", "--size", "window_size", type=int, help="Head/tail window size in bytes.")
@click.option("-H", "--histogram", is_flag=True, help="Show the file size distribution.")
@click.option("-v", "--verbose", is_flag=True, help="Trace every entry while scanning.")
@click.option(
    "--sort/--no-sort",
    "sort_entries",
    default=None,
    help="Order files by relative path (default) or keep filesystem order.",
)
@click.option(
    "--algorithm",
    type=click.Choice(supported_algorithms()),
    help="Digest algorithm for files and the aggregate.",
)
@click.option("--workers", type=int, help="Number of threads sampling files concurrently.")
@click.option(
    "--follow-symlinks/--no-follow-symlinks",
    default=None,
    help="Follow symbolic links while walking.",
)
@click.option("--strict", is_flag=True, help="Exit non-zero when any entry fails.")
@click.option("--json", "json_output", is_flag=True, help="Emit the fingerprint as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    directory: str,
    window_size: int | None,
    histogram: bool,
    verbose: bool,
    sort_entries: bool | None,
    algorithm: str | None,
    workers: int | None,
    follow_symlinks: bool | None,
    strict: bool,
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Fingerprint DIRECTORY and print its digest.

    Args:
        ctx: Click context for parameter source inspection.
        directory: Root directory to fingerprint.
        window_size: Optional override for the head/tail window.
        histogram: When True, print the size distribution table.
        verbose: When True, log every entry at DEBUG level.
        sort_entries: Optional override for relative-path ordering.
        algorithm: Optional digest algorithm override.
        workers: Optional number of sampling threads.
        follow_symlinks: Optional override for following symbolic links.
        strict: When True, exit with status 1 if any entry failed.
        json_output: When True, emit JSON instead of text.
        summary_mode: When True, restrict output to summary lines and errors.
        quiet: When True, suppress non-error output entirely.

    Raises:
        click.ClickException: If configuration is invalid or arguments conflict.
    """

    try:
        config = ConfigManager().load(
            cli_overrides=_collect_scan_overrides(
                window_size=window_size,
                algorithm=algorithm,
                sort_entries=sort_entries,
                follow_symlinks=follow_symlinks,
                workers=workers,
            )
        )
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output, original=exc)
        return

    explicit_quiet = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    explicit_summary = ctx.get_parameter_source("summary_mode") == ParameterSource.COMMANDLINE
    quiet_enabled = quiet if explicit_quiet else config.cli.quiet_default
    summary_only = summary_mode if explicit_summary else config.cli.summary_default
    show_histogram = histogram or config.cli.histogram_default

    if json_output:
        if explicit_quiet and quiet_enabled:
            raise click.ClickException("--json cannot be combined with --quiet.")
        if explicit_summary and summary_only:
            raise click.ClickException("--json cannot be combined with --summary.")
        quiet_enabled = False
        summary_only = False

    if quiet_enabled and summary_only:
        raise click.ClickException(
            "Quiet and summary modes cannot both be enabled. Adjust CLI defaults or flags."
        )

    configure_logging(config.logging, verbose=verbose)

    try:
        result = build_pipeline(config).run(directory)
    except FingerprintError as exc:
        _handle_cli_error(
            str(exc),
            code="fingerprint_error",
            json_output=json_output,
            details={"exception": type(exc).__name__},
            original=exc,
        )
        return

    if json_output:
        console.print_json(data=result.to_payload())
    else:
        fingerprint = result.fingerprint
        _emit_message(
            escape(f"{fingerprint.hexdigest}  {fingerprint.root}"),
            mode="detail",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )
        if show_histogram:
            _emit_message(
                _build_histogram_table(result),
                mode="detail",
                quiet=quiet_enabled,
                summary_only=summary_only,
            )
        _emit_failures(result, quiet=quiet_enabled, summary_only=summary_only)
        _emit_message(
            _format_summary_line(
                "Scan",
                fingerprint.root,
                {
                    "files": fingerprint.file_count,
                    "failures": len(result.failures),
                    "window": result.window_size,
                    "algorithm": result.algorithm,
                },
            ),
            mode="summary",
            quiet=quiet_enabled,
            summary_only=summary_only,
        )

    if strict and result.failures:
        if json_output:
            ctx.exit(1)
        raise click.ClickException(
            f"{len(result.failures)} entr{'y' if len(result.failures) == 1 else 'ies'} "
            "failed during the scan."
        )


@cli.group()
def config() -> None:
    """Manage ffp configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        effective = ConfigManager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY.

    Args:
        key: Dotted path describing the configuration field to update.
        value: YAML-literal value to write into the configuration file.

    Raises:
        click.ClickException: If parsing, assignment, or validation fails.
    """
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    try:
        manager.set_value(key, value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()
    # Ignore the timestamp line, which changes on every save.
    diff = [
        line
        for line in difflib.unified_diff(
            before,
            after,
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
        if "Last updated:" not in line
    ]

    changed = [line for line in diff if line.startswith(("+", "-")) and not line.startswith(("+++", "---"))]
    if not changed:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return

    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {escape(key)}.[/green]")


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in ``$EDITOR`` and save it if it validates.

    Raises:
        click.ClickException: If the edited YAML is malformed or holds invalid values.
    """
    manager = ConfigManager()
    manager.ensure_exists()

    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")
    if edited is None or edited == original:
        console.print("[yellow]No changes detected; configuration left as is.[/yellow]")
        return

    try:
        manager.replace_text(edited)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    console.print(f"[green]Saved {escape(str(manager.config_path))}.[/green]")


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
