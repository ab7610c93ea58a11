"""Write coverage back out as LCOV text.

Per source file and test:

    TN:<test>
    SF:<path>
    FN/FNDA ... FNF/FNH
    BRDA ... BRF/BRH
    DA ... LF/LH
    end_of_record

Found/hit counters are always computed from the aggregates. A collection with
no entries writes nothing, not even its counters.
"""

from __future__ import annotations

import io
from typing import TYPE_CHECKING, TextIO

from lcovtrace.lcov.records import (
    BranchData,
    BranchesFound,
    BranchesHit,
    EndOfRecord,
    FunctionCount,
    FunctionNameDecl,
    FunctionsFound,
    FunctionsHit,
    LineData,
    LinesFound,
    LinesHit,
    Record,
    SourceFile,
    TestName,
)

if TYPE_CHECKING:
    from lcovtrace.lcov.models import Branches, Functions, Lines, Report


def format_record(record: Record) -> str:
    """Canonical LCOV line for ``record``, terminator included."""
    if isinstance(record, TestName):
        body = f"TN:{record.name or ''}"
    elif isinstance(record, SourceFile):
        body = f"SF:{record.path}"
    elif isinstance(record, FunctionNameDecl):
        body = f"FN:{record.line},{record.name}"
    elif isinstance(record, FunctionCount):
        body = f"FNDA:{record.count},{record.name}"
    elif isinstance(record, FunctionsFound):
        body = f"FNF:{record.count}"
    elif isinstance(record, FunctionsHit):
        body = f"FNH:{record.count}"
    elif isinstance(record, LineData):
        body = f"DA:{record.line},{record.count}"
        if record.checksum is not None:
            body += f",{record.checksum}"
    elif isinstance(record, LinesFound):
        body = f"LF:{record.count}"
    elif isinstance(record, LinesHit):
        body = f"LH:{record.count}"
    elif isinstance(record, BranchData):
        taken = "-" if record.taken is None else str(record.taken)
        body = f"BRDA:{record.line},{record.block},{record.branch},{taken}"
    elif isinstance(record, BranchesFound):
        body = f"BRF:{record.count}"
    elif isinstance(record, BranchesHit):
        body = f"BRH:{record.count}"
    elif isinstance(record, EndOfRecord):
        body = "end_of_record"
    else:
        raise TypeError(f"Not an LCOV record: {record!r}")
    return body + "\n"


def _function_records(functions: Functions) -> list[Record]:
    if functions.is_empty():
        return []
    records: list[Record] = []
    for function in functions.values():
        records.append(FunctionNameDecl(line=function.line_number, name=function.name))
        records.append(FunctionCount(name=function.name, count=function.execution_count))
    records.append(FunctionsFound(functions.found_count()))
    records.append(FunctionsHit(functions.hit_count()))
    return records


def _branch_records(branches: Branches) -> list[Record]:
    if branches.is_empty():
        return []
    records: list[Record] = [
        BranchData(
            line=branch.line_number,
            block=branch.block,
            branch=branch.branch,
            taken=branch.execution_count,
        )
        for branch in branches.iter_branches()
    ]
    records.append(BranchesFound(branches.found_count()))
    records.append(BranchesHit(branches.hit_count()))
    return records


def _line_records(lines: Lines) -> list[Record]:
    if lines.is_empty():
        return []
    records: list[Record] = [
        LineData(line=line.line_number, count=line.execution_count, checksum=line.checksum)
        for line in lines.values()
    ]
    records.append(LinesFound(lines.found_count()))
    records.append(LinesHit(lines.hit_count()))
    return records


def report_records(report: Report) -> list[Record]:
    """Every record needed to reproduce ``report``, in output order."""
    records: list[Record] = []
    for path, file in report.items():
        for test_name, test in file.tests.items():
            records.append(TestName(test_name or None))
            records.append(SourceFile(path))
            records.extend(_function_records(test.functions))
            records.extend(_branch_records(test.branches))
            records.extend(_line_records(test.lines))
            records.append(EndOfRecord())
    return records


def write_report(report: Report, output: TextIO) -> None:
    """Write ``report`` as LCOV text to an open text stream."""
    for record in report_records(report):
        output.write(format_record(record))


def format_report(report: Report) -> str:
    buffer = io.StringIO()
    write_report(report, buffer)
    return buffer.getvalue()
