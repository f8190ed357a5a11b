"""CLI entrypoint for vaultframe."""

import logging
from pathlib import Path

import click

from . import __version__
from .logging_config import setup_logging
from .settings import SETTINGS_DIR
from .sources import StoreUnavailableError
from .view_api import ReadOnlyError

# Failures shown to the user as a one-line error instead of a traceback
USER_ERRORS = (ValueError, FileNotFoundError, FileExistsError, StoreUnavailableError, ReadOnlyError)


def _auto_detect_vault(start: Path) -> Path | None:
    """Find the vault (a folder holding .vaultframe/) by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        if (p / SETTINGS_DIR).is_dir():
            return p
    return None


@click.group()
@click.version_option(__version__, prog_name="vaultframe")
@click.option(
    "--vault",
    "-v",
    type=click.Path(exists=False, file_okay=False, dir_okay=True, path_type=Path),
    default=None,
    help="Path to the vault (defaults to the nearest folder with .vaultframe/)",
)
@click.option("--verbose", is_flag=True, help="Log debug output to stderr")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, verbose: bool) -> None:
    """vaultframe - typed tables and views over the notes in a vault."""
    ctx.ensure_object(dict)
    setup_logging(logging.DEBUG if verbose else logging.WARNING)

    if vault is None:
        detected = _auto_detect_vault(Path.cwd())
        if detected is None:
            raise click.ClickException(
                f"Vault not found. Pass --vault /path/to/vault or run from inside a vault with {SETTINGS_DIR}/."
            )
        vault = detected

    if not vault.exists() or not vault.is_dir():
        raise click.BadParameter(f"Directory '{vault}' does not exist.", param_hint="--vault / -v")

    ctx.obj["vault"] = vault.resolve()


@cli.command()
@click.pass_context
def projects(ctx: click.Context) -> None:
    """List configured projects and their views."""
    from .commands.query import run_projects

    try:
        run_projects(ctx.obj["vault"])
    except USER_ERRORS as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("project")
@click.option("--json", "output_json", is_flag=True, help="Output the frame as JSON")
@click.pass_context
def query(ctx: click.Context, project: str, output_json: bool) -> None:
    """Read every note of PROJECT into a table."""
    from .commands.query import run_query

    try:
        run_query(ctx.obj["vault"], project, output_json=output_json)
    except USER_ERRORS as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("project")
@click.option("--view", "view_id", default=None, metavar="VIEW_ID", help="View to show (default: first)")
@click.pass_context
def show(ctx: click.Context, project: str, view_id: str | None) -> None:
    """Render PROJECT through one of its views."""
    from .commands.show import run_show

    try:
        run_show(ctx.obj["vault"], project, view_id)
    except USER_ERRORS as e:
        raise click.ClickException(str(e)) from e


@cli.command(name="set")
@click.argument("project")
@click.argument("record")
@click.argument("assignments", nargs=-1, required=True)
@click.pass_context
def set_values(ctx: click.Context, project: str, record: str, assignments: tuple[str, ...]) -> None:
    """Set front matter values on RECORD (a note path).

    ASSIGNMENTS are KEY=VALUE (VALUE read as YAML), KEY= to empty a value,
    or KEY to remove it.
    """
    from .commands.edit import run_set

    try:
        run_set(ctx.obj["vault"], project, record, list(assignments))
    except USER_ERRORS as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.argument("project")
@click.option("--view", "view_id", default=None, metavar="VIEW_ID", help="View to show (default: first)")
@click.pass_context
def watch(ctx: click.Context, project: str, view_id: str | None) -> None:
    """Show PROJECT and refresh it as notes change (Ctrl+C to stop)."""
    from .commands.watch_cmd import run_watch

    try:
        run_watch(ctx.obj["vault"], project, view_id)
    except USER_ERRORS as e:
        raise click.ClickException(str(e)) from e


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
