"""LCOV trace-file parsing and merging.

This package provides:
- A record model and parser for LCOV trace files (eager and streaming)
- A merge engine folding many trace files into one checked Report
- Writing a Report back out as LCOV text, and coverage summaries

Usage:
    from lcovtrace.lcov import parse_report, merge_files, build_summary

    records = parse_report(Path("coverage/lcov.info").read_text())

    report = merge_files(["unit.info", "integration.info"])
    report.save_as("merged.info")

    summary = build_summary(report)
"""

from lcovtrace.lcov.merge import ReportMerger, merge_files, merge_reports
from lcovtrace.lcov.models import (
    Branch,
    BranchBlocks,
    Branches,
    BranchUnit,
    File,
    Files,
    Function,
    Functions,
    HitFoundCounter,
    Line,
    Lines,
    Report,
    Summary,
    Test,
    Tests,
)
from lcovtrace.lcov.parser import (
    LcovParser,
    each_record,
    parse_record,
    parse_report,
    parse_report_file,
)
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
from lcovtrace.lcov.summary import (
    CoverageSummary,
    build_summary,
    build_text_summary,
    summarize_file,
    summarize_report,
)
from lcovtrace.lcov.writer import format_record, format_report, write_report

__all__ = [
    # Records
    "BranchData",
    "BranchesFound",
    "BranchesHit",
    "EndOfRecord",
    "FunctionCount",
    "FunctionNameDecl",
    "FunctionsFound",
    "FunctionsHit",
    "LineData",
    "LinesFound",
    "LinesHit",
    "Record",
    "SourceFile",
    "TestName",
    # Parsing
    "LcovParser",
    "each_record",
    "parse_record",
    "parse_report",
    "parse_report_file",
    # Aggregates
    "Branch",
    "BranchBlocks",
    "Branches",
    "BranchUnit",
    "File",
    "Files",
    "Function",
    "Functions",
    "HitFoundCounter",
    "Line",
    "Lines",
    "Report",
    "Summary",
    "Test",
    "Tests",
    # Merging
    "ReportMerger",
    "merge_files",
    "merge_reports",
    # Output
    "CoverageSummary",
    "build_summary",
    "build_text_summary",
    "format_record",
    "format_report",
    "summarize_file",
    "summarize_report",
    "write_report",
]
