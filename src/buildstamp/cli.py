"""Command-line interface for buildstamp."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import click
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from buildstamp import __version__
from buildstamp.config import get_config, load_config
from buildstamp.errors import BuildstampError, get_friendly_message
from buildstamp.log import configure_logging

if TYPE_CHECKING:
    from buildstamp.git import CommitMetadata
    from buildstamp.versioning import ResolutionResult

# Load environment variables from .env file
load_dotenv()

console = Console()


def _fail(error: Exception) -> NoReturn:
    """Print an error and exit with status 1."""
    console.print(f"[red]Error:[/red] {escape(get_friendly_message(error))}")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="buildstamp")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors")
@click.option(
    "-C",
    "--repo",
    "repo",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Repository directory (default: current directory)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: search buildstamp.ini / .buildstamp.yaml)",
)
@click.pass_context
def main(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    repo: Path | None,
    config_file: Path | None,
) -> None:
    """buildstamp - Derive build version numbers from git tags and history."""
    ctx.ensure_object(dict)
    try:
        cfg = load_config(config_file) if config_file is not None else get_config()
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        sys.exit(1)

    configure_logging(verbose=verbose, quiet=quiet, level=cfg.logging.level)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["repo"] = repo
    ctx.obj["config"] = cfg


@main.command()
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json", "env"]),
    default=None,
    help="Output format (default: from config or text)",
)
@click.option(
    "--honor-tag-revision/--count-revision",
    default=None,
    help="Use the fourth number of a four-part tag when HEAD is the tagged commit",
)
@click.pass_context
def version(ctx: click.Context, format: str | None, honor_tag_revision: bool | None) -> None:
    """Print the build version of the repository's HEAD."""
    from buildstamp.operations import resolve_version

    cfg = ctx.obj["config"]
    if format is None:
        format = cfg.output.format

    try:
        result = resolve_version(
            ctx.obj["repo"], honor_tag_revision=honor_tag_revision, config=cfg
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled.[/yellow]")
        sys.exit(130)

    if isinstance(result, BuildstampError):
        _fail(result)

    if format == "json":
        _output_version_json(result)
    elif format == "env":
        _output_version_env(result)
    else:
        _output_version_text(result, ctx.obj["verbose"])


def _result_to_dict(result: ResolutionResult) -> dict[str, object]:
    """Convert a resolution result to a JSON-friendly dictionary."""
    return {
        "build_version": str(result.version),
        **result.model_dump(mode="json"),
    }


def _output_version_text(result: ResolutionResult, verbose: bool) -> None:
    """Output the version, with resolution details when verbose."""
    console.print(str(result.version), highlight=False, soft_wrap=True)
    if not verbose:
        return

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Field", style="dim")
    table.add_column("Value")
    if result.tag is not None and result.tag_commit is not None:
        table.add_row("Tag", f"{result.tag.name} ({result.tag_commit.abbreviated_id})")
    else:
        table.add_row("Tag", "(none)")
    table.add_row("Commit", result.current_commit.full_hash)
    table.add_row("Revisions", str(result.version.revision))
    console.print(table)


def _output_version_json(result: ResolutionResult) -> None:
    """Output the resolution result as JSON."""
    console.print_json(json.dumps(_result_to_dict(result)))


def _output_version_env(result: ResolutionResult) -> None:
    """Output KEY=value lines for CI environment files."""
    version = result.version
    lines = {
        "BUILD_VERSION": str(version),
        "BUILD_VERSION_SHORT": version.short,
        "BUILD_MAJOR": version.major,
        "BUILD_MINOR": version.minor,
        "BUILD_PATCH": version.patch,
        "BUILD_REVISION": version.revision,
        "BUILD_COMMIT": result.current_commit.full_hash,
        "BUILD_COMMIT_SHORT": result.current_commit.abbreviated_id,
        "BUILD_TAG": result.tag.name if result.tag else "",
    }
    for key, value in lines.items():
        console.print(f"{key}={value}", highlight=False, markup=False, soft_wrap=True)


@main.command()
@click.pass_context
def tag(ctx: click.Context) -> None:
    """Show the newest version tag."""
    from buildstamp.operations import select_latest_version_tag

    try:
        selected = select_latest_version_tag(ctx.obj["repo"], config=ctx.obj["config"])
    except BuildstampError as e:
        _fail(e)

    if selected is None:
        console.print("[dim]No version tag found.[/dim]")
        return

    console.print(selected.name, highlight=False, markup=False, soft_wrap=True)
    if ctx.obj["verbose"]:
        console.print(f"[dim]Commit:[/dim] {selected.target_commit.full_hash}")
        if selected.tagger_timestamp:
            console.print(f"[dim]Date:[/dim] {selected.tagger_timestamp.isoformat()}")


@main.command()
@click.option("--since", default=None, help="Count only commits after this revision")
@click.pass_context
def count(ctx: click.Context, since: str | None) -> None:
    """Count commits leading up to HEAD."""
    from buildstamp.operations import count_revisions

    try:
        counted = count_revisions(ctx.obj["repo"], since, config=ctx.obj["config"])
    except BuildstampError as e:
        _fail(e)

    if not counted.ok:
        console.print(f"[red]Error:[/red] {escape(counted.error or '')}")
        sys.exit(1)

    console.print(str(counted.count), highlight=False)


@main.command()
@click.argument("commit_hash", required=False)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format",
)
@click.pass_context
def commit(ctx: click.Context, commit_hash: str | None, format: str) -> None:
    """Show author, date and message of a commit (default: HEAD)."""
    from buildstamp.operations import resolve_commit_metadata

    result = resolve_commit_metadata(ctx.obj["repo"], commit_hash, config=ctx.obj["config"])
    if isinstance(result, BuildstampError):
        _fail(result)

    if format == "json":
        output = {**result.model_dump(mode="json"), "message": result.message}
        console.print_json(json.dumps(output))
    else:
        _output_commit_text(result)


def _output_commit_text(metadata: CommitMetadata) -> None:
    """Output commit metadata as formatted text."""
    console.print(f"[bold]commit[/bold] {metadata.commit.full_hash}")
    if metadata.repository_name:
        console.print(f"[dim]Repository:[/dim] {escape(metadata.repository_name)}")
    console.print(f"[dim]Author:[/dim] {escape(metadata.author)}")
    console.print(f"[dim]Date:[/dim]   {metadata.author_date.isoformat()}")
    console.print()
    for line in metadata.message.splitlines():
        console.print(f"    {escape(line)}", highlight=False, soft_wrap=True)


@main.group()
def config() -> None:
    """Manage buildstamp configuration."""
    pass


@config.command(name="show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    from buildstamp.config import get_config_path

    cfg = ctx.obj["config"]
    config_file = get_config_path()

    console.print("[bold]Current Configuration[/bold]")
    console.print()

    if config_file:
        console.print(f"[dim]Config file:[/dim] {config_file}")
    else:
        console.print("[dim]Config file:[/dim] (none - using defaults)")
    console.print()

    console.print("[bold]Git:[/bold]")
    console.print(f"  Executable: {cfg.git.executable or '(git on PATH)'}")
    console.print(f"  Timeout: {cfg.git.timeout} seconds")
    console.print()

    console.print("[bold]Version:[/bold]")
    console.print(f"  Honor tag revision: {cfg.version.honor_tag_revision}")
    console.print(f"  Default version: {cfg.version.default_version}")
    console.print()

    console.print("[bold]Output:[/bold]")
    console.print(f"  Format: {cfg.output.format}")
    console.print(f"  Log level: {cfg.logging.level}")


@config.command(name="path")
def config_path() -> None:
    """Show configuration file paths."""
    from buildstamp.config import find_config_file, get_config_paths

    console.print("[bold]Configuration paths (in priority order):[/bold]")
    config_file = find_config_file()

    for path in get_config_paths():
        if path.exists():
            if path == config_file:
                console.print(f"  [green]{path}[/green] (active)")
            else:
                console.print(f"  {path} (exists)")
        else:
            console.print(f"  [dim]{path}[/dim]")


@config.command(name="init")
@click.option("--force", is_flag=True, help="Overwrite existing config file")
def config_init(force: bool) -> None:
    """Create a default buildstamp.ini in the current directory."""
    from buildstamp.config import save_default_config

    config_path = Path.cwd() / "buildstamp.ini"

    if config_path.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {config_path}")
        console.print("Use --force to overwrite.")
        sys.exit(1)

    save_default_config(config_path)
    console.print(f"[green]Created config file:[/green] {config_path}")
    console.print("Edit this file to customize your settings.")


if __name__ == "__main__":
    main()
