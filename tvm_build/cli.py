"""
Command-line interface for tvm-build.
"""

import logging
import sys
from typing import List, Optional

import click
import requests
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from . import __version__
from .config import BuildConfig, CMakeSetting, Settings, UserSettings
from .core import build, installed, uninstall, version_config
from .errors import TVMBuildError
from .remote import GitHubClient

# Create console for output
console = Console()


class RichConsoleHandler(logging.Handler):
    def emit(self, record):
        try:
            msg = self.format(record)
            level = record.levelname

            if level == 'DEBUG':
                console.print(f"[dim]{msg}[/dim]")
            elif level == 'INFO':
                console.print(msg)
            elif level == 'WARNING':
                console.print(f"[yellow]{msg}[/yellow]")
            elif level == 'ERROR':
                console.print(f"[red]{msg}[/red]")
            elif level == 'CRITICAL':
                console.print(f"[red bold]{msg}[/red bold]")
        except Exception:
            self.handleError(record)


# Configure root logger
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichConsoleHandler()]
)

logger = logging.getLogger("tvm_build")


def fail(error: Exception) -> None:
    """Report a library error and exit with status 1."""
    logger.debug("Error details", exc_info=error)
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    sys.exit(1)


def parse_cmake_settings(ctx, param, values) -> List[CMakeSetting]:
    try:
        return [CMakeSetting.parse(value) for value in values]
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param)


def output_path_option(function):
    return click.option(
        "--output-path",
        type=click.Path(file_okay=False),
        default=None,
        help="Build root to use instead of ~/.tvm_build (or TVM_BUILD_BUILD_ROOT)",
    )(function)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--debug/--no-debug",
    default=False,
    help="Enable debug mode for more verbose output",
)
def cli(debug):
    """A CLI for maintaining TVM installations."""
    logger.setLevel(logging.DEBUG if debug else logging.INFO)


@cli.command()
@click.argument("revision")
@click.argument("repository", required=False)
@click.option("-d", "--debug", is_flag=True, help="Log debug output for this build")
@click.option("-c", "--clean", is_flag=True, help="Remove the revision directory before building")
@click.option(
    "--repository-path",
    type=click.Path(file_okay=False),
    help="Build in an existing directory; it is never cleaned",
)
@output_path_option
@click.option(
    "-D",
    "--cmake",
    "cmake_settings",
    multiple=True,
    callback=parse_cmake_settings,
    metavar="KEY=VALUE",
    help="Extra CMake setting (can be specified multiple times)",
)
def install(
    revision: str,
    repository: Optional[str],
    debug: bool,
    clean: bool,
    repository_path: Optional[str],
    output_path: Optional[str],
    cmake_settings: List[CMakeSetting],
):
    """Install a revision of TVM locally."""
    if debug:
        logger.setLevel(logging.DEBUG)

    config = BuildConfig()
    config.verbose = True
    config.branch = revision
    config.repository = repository
    config.clean = clean
    config.repository_path = repository_path
    config.output_path = output_path
    config.settings = UserSettings(cmake=cmake_settings)

    try:
        result = build(config)
    except TVMBuildError as e:
        fail(e)

    console.print(f"\n[bold green]Installed {result.revision.revision}:[/bold green]")
    console.print(f"  • source: {result.revision.source_path()}")
    console.print(f"  • build:  {result.install_path}")


@cli.command(name="uninstall")
@click.argument("revision")
@output_path_option
def uninstall_command(revision: str, output_path: Optional[str]):
    """Remove an installed revision of TVM."""
    try:
        uninstall(revision, output_path)
    except TVMBuildError as e:
        fail(e)
    console.print(f"[green]Uninstalled {revision}[/green]")


@cli.command(name="version-config")
@click.argument("revision")
@output_path_option
def version_config_command(revision: str, output_path: Optional[str]):
    """Print the paths needed to use an installed revision, as JSON."""
    try:
        config = version_config(revision, output_path)
    except TVMBuildError as e:
        fail(e)
    click.echo(config.model_dump_json(indent=2))


@cli.command(name="list")
@output_path_option
def list_command(output_path: Optional[str]):
    """List installed revisions of TVM."""
    manifests = installed(output_path)
    if not manifests:
        console.print("[yellow]No revisions installed.[/yellow]")
        return

    table = Table(title="Installed TVM revisions")
    table.add_column("Revision", style="bright_green", no_wrap=True)
    table.add_column("Commit", style="white")
    table.add_column("Repository", style="dim")
    table.add_column("Built", style="dim")
    for manifest in manifests:
        table.add_row(
            manifest.revision,
            (manifest.commit or "")[:12],
            manifest.repository or "",
            manifest.built_at.strftime("%Y-%m-%d %H:%M") if manifest.built_at else "",
        )
    console.print(table)


@cli.command(name="list-remote")
@click.argument("repository", required=False)
@click.option(
    "--tags/--branches",
    default=False,
    help="List tags instead of branches",
)
def list_remote_command(repository: Optional[str], tags: bool):
    """List revisions available from a GitHub repository."""
    repository = repository or BuildConfig().repository_url
    client = GitHubClient(Settings())
    kind = "tags" if tags else "branches"

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task(f"[yellow]Fetching {kind}...", total=None)

        def update_fetch_progress(count: int):
            progress.update(task, description=f"[yellow]Fetched {count} {kind}...")

        try:
            if tags:
                names = client.list_tags(repository, progress_callback=update_fetch_progress)
            else:
                names = client.list_branches(repository, progress_callback=update_fetch_progress)
        except requests.exceptions.RequestException as e:
            fail(e)
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="REPOSITORY")

    for name in names:
        click.echo(name)


def main():
    """Entry point for the CLI."""
    try:
        cli()
    except Exception as e:
        logger.exception("Unhandled exception")
        console.print(f"[red]Unhandled error: {str(e)}[/red]")
        sys.exit(1)
