"""lcovtrace parse command - check a trace file and list its records."""

import json
from collections import Counter
from dataclasses import asdict
from pathlib import Path
from typing import Any

import click

from lcovtrace.config.models import LcovTraceConfig
from lcovtrace.core.errors import ParseError
from lcovtrace.lcov.parser import LcovParser, parse_report_file
from lcovtrace.lcov.records import Record


def record_to_dict(record: Record) -> dict[str, Any]:
    return {"kind": type(record).__name__, **asdict(record)}


@click.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Print every record as JSON")
@click.option("--lazy", is_flag=True, help="Stream the file one line at a time")
@click.pass_context
def parse_command(ctx: click.Context, path: Path, as_json: bool, lazy: bool) -> None:
    """Parse an LCOV trace file.

    Prints how many records of each kind PATH holds, or the records themselves
    with --json. Exits with an error at the first malformed line.
    """
    config: LcovTraceConfig = ctx.obj["config"]
    encoding = config.parser.encoding

    try:
        if lazy:
            with LcovParser.from_file(path, encoding=encoding) as parser:
                records = list(parser)
        else:
            records = parse_report_file(path, encoding=encoding)
    except ParseError as e:
        raise click.ClickException(f"{path}: {e}") from e
    except OSError as e:
        raise click.ClickException(f"Cannot read {path}: {e}") from e

    if as_json:
        click.echo(json.dumps([record_to_dict(r) for r in records], indent=2))
        return

    counts = Counter(type(r).__name__ for r in records)
    click.echo(f"{path}: {len(records)} records")
    for kind, count in sorted(counts.items()):
        click.echo(f"  {kind}: {count}")
