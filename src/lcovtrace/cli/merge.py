"""lcovtrace merge command - merge trace files into one."""

from pathlib import Path

import click

from lcovtrace.config.models import LcovTraceConfig
from lcovtrace.core.errors import MergeError
from lcovtrace.lcov.merge import merge_files
from lcovtrace.lcov.writer import write_report


@click.command()
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path)
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write merged LCOV here instead of stdout",
)
@click.pass_context
def merge_command(ctx: click.Context, paths: tuple[Path, ...], output: Path | None) -> None:
    """Merge LCOV trace files.

    PATHS are merged in the order given. Line checksums must agree; any
    conflict aborts without writing output.
    """
    config: LcovTraceConfig = ctx.obj["config"]
    try:
        report = merge_files(paths, config)
    except MergeError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        write_report(report, click.get_text_stream("stdout"))
        return

    report.save_as(output)
    click.echo(f"Merged {len(paths)} trace files ({len(report)} source files) into {output}", err=True)
