"""Command-line interface for fontlocal."""

import asyncio
import logging
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from fontlocal.cache import StylesheetCache
from fontlocal.config import ConfigError, create_default_config, load_settings
from fontlocal.localizer import DownloadError, FetchError, LocalizationPipeline
from fontlocal.models import Fields, Settings
from fontlocal.utils.env import get_cache_dir
from fontlocal.utils.logging import setup_logging

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

# Set up by main(); the --verbose flag lowers its level
_console_handler: logging.Handler | None = None


def config_option(f: F) -> F:
    """Shared --config option decorator."""
    return click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Settings file (default: ./fontlocal.yaml)",
    )(f)


def font_dir_option(f: F) -> F:
    """Shared --font-dir option decorator."""
    return click.option(
        "--font-dir",
        type=click.Path(file_okay=False, path_type=Path),
        default=Fields(Settings).font_directory.default,
        show_default=True,
        help="Directory receiving fonts and cached stylesheets",
    )(f)


def output_option(f: F) -> F:
    """Shared --output option decorator."""
    return click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False, path_type=Path),
        help="Write the stylesheet to this file",
    )(f)


def _get_log_file() -> Path:
    """Get the path to the log file."""
    return get_cache_dir() / "fontlocal.log"


def _setup_logging() -> None:
    """Log everything to the cache directory and warnings to the console.

    Truncates the log file on each run to keep it manageable.
    """
    global _console_handler  # noqa: PLW0603

    log_file = _get_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)
    _console_handler = RichHandler(
        console=Console(stderr=True), show_path=False, level=logging.WARNING
    )
    _console_handler.setFormatter(logging.Formatter("%(message)s"))
    setup_logging(log_file, extra_handlers=[_console_handler])


def async_command(f: F) -> F:
    """Decorator to run async click commands with asyncio.run()."""

    @wraps(f)
    def wrapper(*args: object, **kwargs: object) -> object:
        return asyncio.run(f(*args, **kwargs))

    return wrapper  # type: ignore[return-value]


def _fail(label: str, error: Exception) -> NoReturn:
    click.secho(f"{label}: {error}", fg="red", err=True)
    sys.exit(1)


def _emit(css: str, output: Path | None, console: Console) -> None:
    """Print ``css`` or write it to ``output``."""
    if output is None:
        click.echo(css, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(css, encoding="utf-8")
    console.print(f"[green]✓[/green] Stylesheet written to {output}")


@click.group()
@click.version_option(package_name="fontlocal")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
def cli(verbose: bool) -> None:
    """Self-host remote web fonts with metric-matched fallbacks."""
    if verbose and _console_handler is not None:
        _console_handler.setLevel(logging.DEBUG)


@cli.command()
@click.argument("href")
@click.option("--family", required=True, help="Font family the stylesheet declares")
@click.option(
    "--fallback",
    "fallbacks",
    multiple=True,
    help="Local font for the fallback face (repeatable, in order)",
)
@font_dir_option
@click.option(
    "--mount-prefix",
    default=Fields(Settings).mount_prefix.default,
    show_default=True,
    help="URL prefix under which the font directory is served",
)
@output_option
@async_command
async def generate(  # noqa: PLR0913  # one option per pipeline input
    href: str,
    family: str,
    fallbacks: tuple[str, ...],
    font_dir: Path,
    mount_prefix: str,
    output: Path | None,
) -> None:
    """Localize the remote stylesheet at HREF."""
    console = Console(stderr=True)
    pipeline = LocalizationPipeline(font_dir, mount_prefix)

    try:
        css = await pipeline.generate(href, family, list(fallbacks))
    except FetchError as e:
        _fail("Fetch error", e)
    except DownloadError as e:
        _fail("Download error", e)
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Generation cancelled[/yellow]")
        sys.exit(1)

    _emit(css, output, console)


@cli.command()
@config_option
@output_option
@async_command
async def build(config_path: Path | None, output: Path | None) -> None:
    """Localize all stylesheets listed in the settings file."""
    console = Console(stderr=True)

    try:
        settings = load_settings(config_path)
        pipeline = LocalizationPipeline.from_settings(settings)
        css = await pipeline.build(settings)
    except ConfigError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        click.echo("\nRun 'fontlocal config init' to create a configuration.")
        sys.exit(1)
    except FetchError as e:
        _fail("Fetch error", e)
    except DownloadError as e:
        _fail("Download error", e)
    except KeyboardInterrupt:
        console.print("\n\n[yellow]Build cancelled[/yellow]")
        sys.exit(1)

    _emit(css, output or settings.output_path, console)


@cli.group()
def cache() -> None:
    """Inspect or clear cached stylesheets."""


@cache.command("list")
@font_dir_option
def cache_list(font_dir: Path) -> None:
    """List cached stylesheets."""
    entries = StylesheetCache(font_dir).entries()
    if not entries:
        click.secho("No cached stylesheets.", fg="yellow")
        click.echo(f"\nFont directory: {font_dir}")
        return

    table = Table(title=f"Cached stylesheets in {font_dir}")
    table.add_column("File")
    table.add_column("Size", justify="right")
    for path in entries:
        table.add_row(path.name, f"{path.stat().st_size} B")
    Console().print(table)


@cache.command("clear")
@font_dir_option
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
def cache_clear(font_dir: Path, yes: bool) -> None:
    """Delete cached stylesheets; fonts are kept."""
    cache_store = StylesheetCache(font_dir)
    count = len(cache_store.entries())
    if count == 0:
        click.secho("No cached stylesheets.", fg="yellow")
        return
    if not yes:
        click.confirm(f"Delete {count} cached stylesheet(s)?", abort=True)
    removed = cache_store.clear()
    click.secho(f"✓ Removed {removed} cached stylesheet(s)", fg="green")


@cli.group()
def config() -> None:
    """Manage the settings file."""


@config.command("init")
@config_option
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(config_path: Path | None, force: bool) -> None:
    """Create a starter settings file."""
    try:
        create_default_config(config_path, force=force)
    except ConfigError as e:
        click.secho(f"Configuration error: {e}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"✓ Configuration written to {config_path or 'fontlocal.yaml'}", fg="green")


def main() -> None:
    """Main entry point for the CLI.

    Sets up logging and provides a generic catch-all error handler
    for unexpected errors.
    """
    _setup_logging()
    try:
        cli()
    except Exception:
        # Full traceback goes to the log file only
        logger.exception("Fatal error occurred")

        click.secho("\nFatal error occurred.", fg="red", err=True)
        click.secho(
            f"Check logs for details: {_get_log_file()}",
            fg="yellow",
            err=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    main()
