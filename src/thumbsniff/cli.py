"""Command line interface for thumbsniff."""

from __future__ import annotations

import difflib
import logging
from pathlib import Path
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from thumbsniff.config import ConfigError, ConfigManager, ThumbsniffConfig, resolve_with_precedence
from thumbsniff.config.resolver import expand_dotted, merge_mappings
from thumbsniff.detection import UnsupportedMimeError
from thumbsniff.pipeline import ThumbnailPipeline
from thumbsniff.processing import ProcessingError

console = Console()
LOGGER = logging.getLogger(__name__)


def _load_config(cli_overrides: Optional[dict[str, Any]] = None) -> ThumbsniffConfig:
    """Resolve configuration for a command and apply its logging level.

    Raises:
        click.ClickException: If configuration cannot be loaded.
    """
    try:
        config = ConfigManager().load(cli_overrides=cli_overrides, ensure_file=False)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    logging.basicConfig(
        level=getattr(logging, config.logging.level, logging.WARNING),
        format="%(levelname)s %(name)s: %(message)s",
    )
    return config


def _handle_cli_error(message: str, *, code: str, json_output: bool, original: Exception) -> None:
    """Emit an error as JSON or as a ClickException and stop the command.

    Raises:
        SystemExit: In JSON mode, after printing the error payload.
        click.ClickException: Otherwise.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="thumbsniff")
def cli() -> None:
    """thumbsniff detects media types from magic bytes and renders thumbnails."""


@cli.command()
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "--accept",
    "accepted",
    multiple=True,
    help="Only accept this MIME type; repeat for several.",
)
@click.option("--json", "json_output", is_flag=True, help="Emit JSON results.")
@click.pass_context
def detect(
    ctx: click.Context, paths: tuple[Path, ...], accepted: tuple[str, ...], json_output: bool
) -> None:
    """Print the detected MIME type and extension of each PATH.

    Exits with status 1 when any file is unrecognized or not accepted.
    """
    overrides: dict[str, Any] = {}
    if accepted:
        overrides["processing.accepted_mime_types"] = list(accepted)
    config = _load_config(overrides)
    json_output = json_output or config.cli.json_default

    pipeline = ThumbnailPipeline(options=config.processing)
    results: list[dict[str, Any]] = []
    for path in paths:
        entry: dict[str, Any] = {"path": str(path)}
        try:
            with path.open("rb") as fh:
                detection = pipeline.detect(fh)
        except UnsupportedMimeError as exc:
            entry.update(mime=exc.mime, extension=None, error=str(exc))
        except OSError as exc:
            entry.update(mime=None, extension=None, error=str(exc))
        else:
            entry.update(mime=detection.mime, extension=detection.extension, error=None)
        results.append(entry)

    failures = sum(1 for entry in results if entry["error"])
    if json_output:
        console.print_json(data={"results": results, "failures": failures})
    else:
        table = Table(title="Detected types")
        table.add_column("Path")
        table.add_column("MIME type")
        table.add_column("Ext")
        for entry in results:
            if entry["error"]:
                table.add_row(entry["path"], f"[red]{entry['error']}[/red]", "-")
            else:
                table.add_row(entry["path"], entry["mime"], entry["extension"])
        console.print(table)

    if failures:
        ctx.exit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Destination file. Defaults to <name>.thumb.<ext> next to PATH.",
)
@click.option("--width", type=int, help="Maximum thumbnail width.")
@click.option("--height", type=int, help="Maximum thumbnail height.")
@click.option("--json", "json_output", is_flag=True, help="Emit a JSON summary.")
def thumb(
    path: Path,
    output: Optional[Path],
    width: Optional[int],
    height: Optional[int],
    json_output: bool,
) -> None:
    """Render a thumbnail for PATH."""
    overrides: dict[str, Any] = {}
    if width is not None:
        overrides["processing.thumb_width"] = width
    if height is not None:
        overrides["processing.thumb_height"] = height
    config = _load_config(overrides)
    json_output = json_output or config.cli.json_default

    pipeline = ThumbnailPipeline(options=config.processing)
    try:
        with path.open("rb") as fh:
            source, thumbnail = pipeline.process(fh)
    except UnsupportedMimeError as exc:
        _handle_cli_error(str(exc), code="unsupported_mime", json_output=json_output, original=exc)
        return
    except ProcessingError as exc:
        _handle_cli_error(str(exc), code="processing_failed", json_output=json_output, original=exc)
        return

    destination = output or path.with_name(f"{path.stem}.thumb.{thumbnail.extension}")
    try:
        destination.write_bytes(thumbnail.data)
    except OSError as exc:
        _handle_cli_error(
            f"cannot write {destination}: {exc}",
            code="write_failed",
            json_output=json_output,
            original=exc,
        )
        return
    LOGGER.info("Wrote %s", destination)

    if json_output:
        console.print_json(
            data={
                "source": {
                    "path": str(path),
                    "mime": source.mime,
                    "extension": source.extension,
                    "width": source.width,
                    "height": source.height,
                },
                "thumbnail": {
                    "path": str(destination),
                    "width": thumbnail.width,
                    "height": thumbnail.height,
                    "format": "png" if thumbnail.is_png else "jpeg",
                },
            }
        )
        return

    console.print(
        f"[green]{path.name} ({source.mime}, {source.width}x{source.height}) -> "
        f"{destination} ({thumbnail.width}x{thumbnail.height}).[/green]"
    )


@cli.group()
def config() -> None:
    """View and update thumbsniff configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    manager = ConfigManager()
    try:
        config = manager.load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(config.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value addressed by a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    if not key.strip(".").strip():
        raise click.ClickException("KEY must be a dotted path such as 'processing.thumb_width'.")
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = merge_mappings(
            manager.load_file_overrides(), expand_dotted({key: parsed}, source_name="cli")
        )
        resolve_with_precedence(defaults=ThumbsniffConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    manager.save(file_data)
    diff = list(
        difflib.unified_diff(
            before,
            manager.read_text().splitlines(),
            fromfile="config.yaml (before)",
            tofile="config.yaml (after)",
            lineterm="",
        )
    )
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key}.[/green]")


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
