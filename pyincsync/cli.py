"""CLI interface for pyincsync."""

import logging
from typing import Any

import click

from .config import SyncConfig, load_config
from .exceptions import ConfigError, FilesystemError
from .output import OutputFormatter
from .sync import SyncEngine
from .utils import CONFIG_ENV_VAR, DEFAULT_CONFIG_FILE

logger = logging.getLogger(__name__)


def _load_config_or_exit(ctx: Any, out: OutputFormatter) -> SyncConfig:
    """Load the configuration named on the command line, exit on failure."""
    config_path = ctx.obj["config_path"]
    try:
        return load_config(config_path)
    except ConfigError as e:
        out.error(f"Config load error: {e}")
        ctx.exit(1)
        raise  # Unreachable, but helps type checker


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "-c",
    "config_path",
    envvar=CONFIG_ENV_VAR,
    default=DEFAULT_CONFIG_FILE,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="Path to the JSON configuration file",
)
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option()
@click.pass_context
def main(
    ctx: Any,
    config_path: str,
    quiet: bool,
    json: bool,
    verbose: bool,
) -> None:
    """PyIncSync - copy newly arrived files from a source tree to a mirror.

    Running without a command performs a sync.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["out"] = OutputFormatter(json_output=json, quiet=quiet)
    ctx.obj["verbose"] = verbose

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("pyincsync").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    if ctx.invoked_subcommand is None:
        ctx.invoke(sync)


@main.command()
@click.option(
    "--dry-run", is_flag=True, help="Show what would be copied without copying"
)
@click.pass_context
def sync(ctx: Any, dry_run: bool = False) -> None:
    """Copy new files from the source tree to the destination tree.

    Every subdirectory of the source root is mirrored into the destination.
    Files are copied when their name sorts after the last file copied into
    that directory (stored in last_copied.txt), their extension is not
    excluded and they are not empty. Files placed directly in the source
    root are not copied.

    Known limitation: a file whose name sorts before the last copied name
    is never picked up.

    Examples:
        pyincsync                          # Sync using ./config.json
        pyincsync -c /etc/feed.json sync   # Use another config file
        pyincsync sync --dry-run           # Preview copies
        pyincsync --json sync              # Print statistics as JSON
    """
    out: OutputFormatter = ctx.obj["out"]
    config = _load_config_or_exit(ctx, out)

    try:
        engine = SyncEngine(config, out)
        stats = engine.sync(dry_run=dry_run)
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)
    except FilesystemError as e:
        out.error(f"Sync error: {e}")
        ctx.exit(1)
    else:
        if out.json_output:
            out.output_json({"dry_run": dry_run, **stats})
        elif dry_run:
            out.success("Dry run completed.")
        else:
            out.success("Sync completed.")


@main.command()
@click.pass_context
def status(ctx: Any) -> None:
    """Show watermarks and pending files per directory.

    Only directories that contain at least one eligible file are listed.
    Nothing is written.
    """
    out: OutputFormatter = ctx.obj["out"]
    config = _load_config_or_exit(ctx, out)

    try:
        plans = list(SyncEngine(config, out).plan())
    except KeyboardInterrupt:
        out.warning("\nStatus cancelled by user")
        ctx.exit(130)
        return  # For type checker
    except FilesystemError as e:
        out.error(f"Sync error: {e}")
        ctx.exit(1)
        return  # For type checker

    if out.json_output:
        out.output_json([plan.to_dict() for plan in plans])
        return

    if not plans:
        out.info("No eligible files found.")
        return

    rows: list[tuple[str, str, int, int]] = []
    pending_total = 0
    for plan in plans:
        rows.append(
            (
                plan.relative_path,
                plan.watermark or "-",
                len(plan.to_copy),
                plan.up_to_date,
            )
        )
        pending_total += len(plan.to_copy)

    out.print_table(
        f"{config.source_root} -> {config.dest_root}",
        ["Directory", "Watermark", "Pending", "Synced"],
        rows,
    )
    out.info(f"{pending_total} file(s) pending")
