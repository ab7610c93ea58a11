"""lcovtrace summary command - coverage totals of merged trace files."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from lcovtrace.config.models import LcovTraceConfig
from lcovtrace.core.errors import MergeError
from lcovtrace.lcov.merge import merge_files
from lcovtrace.lcov.models import Report
from lcovtrace.lcov.summary import build_summary, build_text_summary, summarize_file


def _format_rate(rate: float | None) -> str:
    return "-" if rate is None else f"{rate:.1f}%"


def _make_summary_table(report: Report) -> Table:
    table = Table(box=None, padding=(0, 1), pad_edge=False)
    table.add_column("File", style="cyan", no_wrap=True)
    table.add_column("Lines", justify="right")
    table.add_column("Functions", justify="right")
    table.add_column("Branches", justify="right")

    for path, file in report.items():
        summary = summarize_file(file)
        table.add_row(
            path,
            _format_rate(summary.line_rate),
            _format_rate(summary.function_rate),
            _format_rate(summary.branch_rate),
        )
    return table


@click.command()
@click.argument(
    "paths", nargs=-1, required=True, type=click.Path(dir_okay=False, path_type=Path)
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--max-files", type=int, default=None, help="With --json, only list the N least covered files")
@click.pass_context
def summary_command(
    ctx: click.Context, paths: tuple[Path, ...], as_json: bool, max_files: int | None
) -> None:
    """Summarize coverage of one or more LCOV trace files.

    The files are merged first, exactly as by the merge command.
    """
    config: LcovTraceConfig = ctx.obj["config"]
    try:
        report = merge_files(paths, config)
    except MergeError as e:
        raise click.ClickException(str(e)) from e

    if as_json:
        click.echo(json.dumps(build_summary(report, max_files=max_files), indent=2))
        return

    console = Console()
    if len(report):
        console.print(_make_summary_table(report))
        console.print()
    console.print(build_text_summary(report), highlight=False)
