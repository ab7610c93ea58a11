"""lcovtrace CLI - parse, merge and summarize LCOV trace files."""

from pathlib import Path

import click

from lcovtrace import __version__
from lcovtrace.cli.merge import merge_command
from lcovtrace.cli.parse import parse_command
from lcovtrace.cli.summary import summary_command
from lcovtrace.config import load_config
from lcovtrace.core.errors import ConfigError
from lcovtrace.core.logging import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="lcovtrace")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ./.lcovtrace.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """lcovtrace - LCOV trace file parser and merger."""
    try:
        config = load_config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e)) from e
    if verbose:
        config.logging.level = "DEBUG"
    configure_logging(config=config.logging)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = config


cli.add_command(parse_command, name="parse")
cli.add_command(merge_command, name="merge")
cli.add_command(summary_command, name="summary")


if __name__ == "__main__":
    cli()
