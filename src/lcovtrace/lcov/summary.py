"""Coverage summaries of a merged Report.

A File can be covered by several tests. Summaries take the union over tests:
a line, function or branch counts once per file and is hit if any test hit it.

Output schema for build_summary:
{
    "summary": {
        "total_files": int,
        "covered_files": int,
        "total_lines": int,
        "covered_lines": int,
        "line_coverage_percent": float,
        "total_branches": int,              # only when branches exist
        "covered_branches": int,
        "branch_coverage_percent": float,
        "total_functions": int,             # only when functions exist
        "covered_functions": int,
        "function_coverage_percent": float
    },
    "files": [
        {
            "path": str,
            "tests": [str, ...],
            "total_lines": int,
            "covered_lines": int,
            "coverage_percent": float,
            "missed_lines": [int, ...],
            "missed_lines_truncated": bool  # only when truncated
        },
        ...
    ]
}
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lcovtrace.lcov.models import File, Report


def _percent(hit: int, found: int) -> float | None:
    if found == 0:
        return None
    return round(hit / found * 100.0, 2)


@dataclass(frozen=True, slots=True)
class CoverageSummary:
    """Found/hit totals for lines, functions and branches."""

    lines_found: int = 0
    lines_hit: int = 0
    functions_found: int = 0
    functions_hit: int = 0
    branches_found: int = 0
    branches_hit: int = 0

    @property
    def line_rate(self) -> float | None:
        return _percent(self.lines_hit, self.lines_found)

    @property
    def function_rate(self) -> float | None:
        return _percent(self.functions_hit, self.functions_found)

    @property
    def branch_rate(self) -> float | None:
        return _percent(self.branches_hit, self.branches_found)

    def __add__(self, other: CoverageSummary) -> CoverageSummary:
        return CoverageSummary(
            lines_found=self.lines_found + other.lines_found,
            lines_hit=self.lines_hit + other.lines_hit,
            functions_found=self.functions_found + other.functions_found,
            functions_hit=self.functions_hit + other.functions_hit,
            branches_found=self.branches_found + other.branches_found,
            branches_hit=self.branches_hit + other.branches_hit,
        )


def line_hits(file: File) -> dict[int, int]:
    """Execution count per line number, summed over every test."""
    hits: dict[int, int] = {}
    for test in file.tests.values():
        for line in test.lines.values():
            hits[line.line_number] = hits.get(line.line_number, 0) + line.execution_count
    return dict(sorted(hits.items()))


def summarize_file(file: File) -> CoverageSummary:
    lines = line_hits(file)

    functions: dict[str, int] = {}
    branches: dict[tuple[int, int, int], int] = {}
    for test in file.tests.values():
        for function in test.functions.values():
            functions[function.name] = functions.get(function.name, 0) + function.execution_count
        for branch in test.branches.iter_branches():
            key = (branch.line_number, branch.block, branch.branch)
            branches[key] = branches.get(key, 0) + branch.execution_count

    return CoverageSummary(
        lines_found=len(lines),
        lines_hit=sum(1 for hits in lines.values() if hits > 0),
        functions_found=len(functions),
        functions_hit=sum(1 for hits in functions.values() if hits > 0),
        branches_found=len(branches),
        branches_hit=sum(1 for hits in branches.values() if hits > 0),
    )


def summarize_report(report: Report) -> CoverageSummary:
    total = CoverageSummary()
    for file in report.values():
        total += summarize_file(file)
    return total


def compute_file_stats(report: Report) -> list[dict[str, Any]]:
    """Per-file coverage statistics, sorted by path.

    Args:
        report: The merged report to analyze.

    Returns:
        List of dicts with per-file stats.
    """
    file_stats = []

    for path, file in report.items():
        lines = line_hits(file)
        summary = summarize_file(file)
        coverage_percent = summary.line_rate

        file_stats.append(
            {
                "path": path,
                "tests": list(file.tests),
                "total_lines": summary.lines_found,
                "covered_lines": summary.lines_hit,
                "coverage_percent": 100.0 if coverage_percent is None else coverage_percent,
                "missed_lines": [number for number, hits in lines.items() if hits == 0],
            }
        )

    return file_stats


def build_summary(
    report: Report,
    *,
    include_files: bool = True,
    max_files: int | None = None,
    max_missed_lines: int = 20,
) -> dict[str, Any]:
    """Build a structured coverage summary from a report.

    Args:
        report: The merged report to summarize.
        include_files: Whether to include per-file details.
        max_files: Limit number of files (lowest coverage first). None = all.
        max_missed_lines: Max missed lines to list per file.

    Returns:
        Structured dict suitable for JSON serialization.
    """
    total = summarize_report(report)
    line_rate = total.line_rate

    covered_files = 0
    for file in report.values():
        file_summary = summarize_file(file)
        if file_summary.lines_found and file_summary.lines_hit == file_summary.lines_found:
            covered_files += 1

    summary_dict: dict[str, Any] = {
        "total_files": len(report),
        "covered_files": covered_files,
        "total_lines": total.lines_found,
        "covered_lines": total.lines_hit,
        "line_coverage_percent": 100.0 if line_rate is None else line_rate,
    }

    if total.branches_found > 0:
        summary_dict["total_branches"] = total.branches_found
        summary_dict["covered_branches"] = total.branches_hit
        summary_dict["branch_coverage_percent"] = total.branch_rate

    if total.functions_found > 0:
        summary_dict["total_functions"] = total.functions_found
        summary_dict["covered_functions"] = total.functions_hit
        summary_dict["function_coverage_percent"] = total.function_rate

    result: dict[str, Any] = {"summary": summary_dict}

    if include_files:
        file_stats = compute_file_stats(report)

        # Lowest coverage first
        file_stats.sort(key=lambda f: f["coverage_percent"])

        if max_files is not None:
            file_stats = file_stats[:max_files]

        for fs in file_stats:
            missed = fs["missed_lines"]
            if len(missed) > max_missed_lines:
                fs["missed_lines"] = missed[:max_missed_lines]
                fs["missed_lines_truncated"] = True

        result["files"] = file_stats

    return result


def build_text_summary(report: Report) -> str:
    """One-line human-readable summary."""
    total = summarize_report(report)
    if total.lines_found == 0:
        return "No coverage data"

    text = f"Coverage: {total.line_rate:.1f}% ({total.lines_hit}/{total.lines_found} lines)"
    if total.functions_found:
        text += f", {total.functions_hit}/{total.functions_found} functions"
    if total.branches_found:
        text += f", {total.branches_hit}/{total.branches_found} branches"
    return text
