"""Command-line interface for MediaTidy."""

import asyncio
import signal
import sys
import threading
from pathlib import Path

import click

from mediatidy import __version__
from mediatidy.config import load_config
from mediatidy.core.batch import BatchProcessor
from mediatidy.core.convert import ConversionOrchestrator
from mediatidy.core.pipeline import ProcessingPipeline
from mediatidy.core.probe import MediaProber
from mediatidy.core.scanner import FileScanner
from mediatidy.errors import ParseError
from mediatidy.models.file import ConversionResult, ProcessResult
from mediatidy.models.track import ParserType
from mediatidy.tools import ToolContext
from mediatidy.utils.logger import get_logger, setup_logging

STATUS_STYLES = {
    "success": ("✓", "green"),
    "skipped": ("⊘", "yellow"),
    "dry_run": ("⊙", "cyan"),
    "failed": ("✗", "red"),
    "error": ("✗", "red"),
}


def _install_cancel_handler(cancel: threading.Event) -> None:
    """Let the first Ctrl+C finish the running tool, the second one abort."""

    def handler(signum, frame):
        if cancel.is_set():
            raise KeyboardInterrupt
        click.echo("\nCancelling after the current step (Ctrl+C again to abort)", err=True)
        cancel.set()

    signal.signal(signal.SIGINT, handler)


def _echo_result(result: ProcessResult, indent: str = "") -> None:
    symbol, colour = STATUS_STYLES[result.status]
    click.secho(f"{indent}{symbol} {result}", fg=colour)


def _echo_conversion(file: Path, result: ConversionResult) -> None:
    if result:
        click.secho(f"✓ {file.name} -> {result.output_path.name}", fg="green")
        return
    click.secho(f"✗ {file.name}: {result.reason}", fg="red", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--dry-run", "-n", is_flag=True, help="Show what would be done without changing files")
@click.pass_context
def cli(ctx, config, verbose, dry_run):
    """MediaTidy - Normalize media files to clean Matroska."""
    try:
        cfg = load_config(config)
        if dry_run:
            cfg.execution.dry_run = True
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging, verbose=verbose)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    ctx.obj.setdefault("cancel", threading.Event())


def _tools(ctx) -> ToolContext:
    if "tools" not in ctx.obj:
        ctx.obj["tools"] = ToolContext.from_config(ctx.obj["config"])
    return ctx.obj["tools"]


def _orchestrator(ctx) -> ConversionOrchestrator:
    return ConversionOrchestrator(ctx.obj["config"], _tools(ctx), ctx.obj["cancel"])


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--parser",
    "-p",
    type=click.Choice([parser.value for parser in ParserType] + ["all"]),
    default=ParserType.MKVMERGE.value,
    show_default=True,
    help="Tool used to inspect the file",
)
@click.pass_context
def info(ctx, file, parser):
    """Show the tracks of a media file."""
    prober = MediaProber(_tools(ctx))

    try:
        if parser == "all":
            results = prober.probe_all(file)
        else:
            parser_type = ParserType(parser)
            results = {parser_type: prober.probe(file, parser_type)}
    except ParseError as e:
        click.secho(f"✗ {file.name}: {e}", fg="red", err=True)
        sys.exit(1)

    if not results:
        click.secho(f"✗ {file.name}: no tool could read the file", fg="red", err=True)
        sys.exit(1)

    for parser_type, media_info in results.items():
        click.secho(f"[{parser_type.value}] {file.name}", bold=True)
        click.echo(f"  {media_info}")
        for track in media_info.all_tracks():
            click.echo(f"    {track}")
        if media_info.has_errors:
            click.secho("  ! problems found, remux recommended", fg="yellow")


@cli.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--recursive/--no-recursive",
    "-r/-R",
    default=True,
    help="Scan subdirectories recursively (default: True)",
)
@click.option("--workers", "-w", type=click.IntRange(min=1), default=None, help="Files processed at once")
@click.pass_context
def process(ctx, path, recursive, workers):
    """Process a media file or every media file in a directory."""
    config = ctx.obj["config"]
    logger = get_logger(__name__)

    try:
        files = FileScanner().scan(path, recursive=recursive)
    except (FileNotFoundError, ValueError) as e:
        click.secho(f"✗ Error scanning: {e}", fg="red", err=True)
        sys.exit(1)

    if not files:
        click.secho("⊘ No media files found", fg="yellow")
        sys.exit(0)

    click.echo(f"Found {len(files)} file(s)")

    pipeline = ProcessingPipeline(config, _tools(ctx), ctx.obj["cancel"])
    batch = BatchProcessor(config, pipeline)
    summary = asyncio.run(batch.run(files, workers))

    for result in summary.results:
        _echo_result(result, indent="  ")

    counts = summary.counts
    click.echo("=" * 60)
    click.echo("Summary:")
    click.secho(f"  ✓ Success:  {counts['success']}", fg="green")
    click.secho(f"  ⊙ Dry run:  {counts['dry_run']}", fg="cyan")
    click.secho(f"  ⊘ Skipped:  {counts['skipped']}", fg="yellow")
    click.secho(f"  ✗ Failed:   {counts['failed']}", fg="red")
    click.secho(f"  ✗ Errors:   {counts['error']}", fg="red")
    if summary.not_started:
        click.secho(f"  ⊘ Cancelled: {len(summary.not_started)}", fg="yellow")
    click.echo(f"  Total:      {len(files)}")

    logger.debug("Process command finished", ok=summary.ok)
    if not summary.ok:
        sys.exit(1)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def remux(ctx, file):
    """Remux a file to MKV without re-encoding."""
    _echo_conversion(file, _orchestrator(ctx).remux_to_mkv(file))


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--handbrake", is_flag=True, help="Encode with HandBrakeCLI instead of ffmpeg")
@click.pass_context
def convert(ctx, file, handbrake):
    """Re-encode a file to MKV."""
    orchestrator = _orchestrator(ctx)
    if handbrake:
        result = orchestrator.convert_to_mkv_handbrake(file)
    else:
        result = orchestrator.convert_to_mkv(file)
    _echo_conversion(file, result)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def deinterlace(ctx, file):
    """Re-encode a file to MKV with de-interlacing."""
    _echo_conversion(file, _orchestrator(ctx).deinterlace_to_mkv(file))


@cli.command()
@click.pass_context
def version(ctx):
    """Show version information."""
    click.echo(f"MediaTidy v{__version__}")


def main():
    """Entry point for the CLI."""
    cancel = threading.Event()
    _install_cancel_handler(cancel)
    cli(obj={"cancel": cancel})


if __name__ == "__main__":
    main()
