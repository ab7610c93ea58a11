"""Coverage aggregates built from LCOV records.

Report
 └─ Files        source path → File
     └─ File
         └─ Tests    test name → Test
             └─ Test
                 ├─ Lines      line number → Line
                 ├─ Functions  function name → Function
                 └─ Branches   line number → BranchBlocks
                                  └─ (block, branch) → Branch

Every collection is a read-only ``Mapping`` iterated in key order; the only
mutators are the ``try_merge*`` methods used while a report is being built.
Counts accumulate by addition. Conflicts raise a ConflictError subclass.
"""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol, TypeVar

from lcovtrace.core.errors import (
    BranchError,
    ChecksumError,
    ConflictError,
    FunctionError,
    MergeBranch,
    MergeLine,
)
from lcovtrace.lcov.records import BranchData, FunctionCount, FunctionNameDecl, LineData

if TYPE_CHECKING:
    from lcovtrace.lcov.summary import CoverageSummary

K = TypeVar("K")
V = TypeVar("V")


class HitFoundCounter(Protocol):
    """Anything that can report how many entries exist and how many were hit."""

    def hit_count(self) -> int: ...

    def found_count(self) -> int: ...


class Summary(Mapping[K, V]):
    """Ordered, read-only mapping shared by every aggregate collection."""

    def __init__(self) -> None:
        self._entries: dict[K, V] = {}

    def __getitem__(self, key: K) -> V:
        return self._entries[key]

    def __iter__(self) -> Iterator[K]:
        return iter(sorted(self._entries))  # type: ignore[type-var]

    def __len__(self) -> int:
        return len(self._entries)

    def contains_key(self, key: K) -> bool:
        return key in self._entries

    def is_empty(self) -> bool:
        return not self._entries

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


# =============================================================================
# Lines
# =============================================================================


@dataclass(eq=False, slots=True)
class Line:
    """Execution count of one source line.

    Two lines are equal when both carry checksums and the checksums match;
    otherwise they are equal when their line numbers match.
    """

    line_number: int
    execution_count: int = 0
    checksum: str | None = None

    @classmethod
    def from_record(cls, data: LineData) -> Line:
        return cls(data.line, data.count, data.checksum)

    def has_checksum(self) -> bool:
        return self.checksum is not None

    def is_hit(self) -> bool:
        return self.execution_count > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Line):
            return NotImplemented
        if self.has_checksum() and other.has_checksum():
            return self.checksum == other.checksum
        return self.line_number == other.line_number

    __hash__ = None  # type: ignore[assignment]

    def try_merge(self, other: Line | LineData) -> None:
        incoming = other if isinstance(other, Line) else Line.from_record(other)
        if self.has_checksum():
            if not incoming.has_checksum():
                raise ChecksumError.empty(_merge_line(self), _merge_line(incoming))
            if self.checksum != incoming.checksum:
                raise ChecksumError.mismatch(_merge_line(self), _merge_line(incoming))
        elif incoming.has_checksum():
            self.checksum = incoming.checksum
        self.execution_count += incoming.execution_count


def _merge_line(line: Line) -> MergeLine:
    return MergeLine(line=line.line_number, checksum=line.checksum)


class Lines(Summary[int, Line]):
    """Lines of one test, keyed by line number."""

    def hit_count(self) -> int:
        return sum(1 for line in self._entries.values() if line.is_hit())

    def found_count(self) -> int:
        return len(self._entries)

    def try_merge(self, other: LineData | Lines) -> None:
        if isinstance(other, Lines):
            for line in other.values():
                self._merge_line(line.line_number, line)
        else:
            self._merge_line(other.line, other)

    def _merge_line(self, number: int, incoming: Line | LineData) -> None:
        existing = self._entries.get(number)
        if existing is None:
            if isinstance(incoming, Line):
                self._entries[number] = copy.copy(incoming)
            else:
                self._entries[number] = Line.from_record(incoming)
            return
        existing.try_merge(incoming)


# =============================================================================
# Functions
# =============================================================================


@dataclass(slots=True)
class Function:
    """A function: declaration line and accumulated execution count.

    The line stays 0 until an ``FN:`` record declares it.
    """

    name: str
    line_number: int = 0
    execution_count: int = 0

    def is_hit(self) -> bool:
        return self.execution_count > 0

    def try_merge(self, other: Function | FunctionNameDecl | FunctionCount) -> None:
        if self.name != other.name:
            raise FunctionError.mismatch(self.name, other.name)
        if isinstance(other, FunctionNameDecl):
            self.line_number = other.line
        elif isinstance(other, FunctionCount):
            self.execution_count += other.count
        else:
            if other.line_number:
                self.line_number = other.line_number
            self.execution_count += other.execution_count


class Functions(Summary[str, Function]):
    """Functions of one test, keyed by name."""

    def hit_count(self) -> int:
        return sum(1 for function in self._entries.values() if function.is_hit())

    def found_count(self) -> int:
        return len(self._entries)

    def try_merge(self, other: FunctionNameDecl | FunctionCount | Functions) -> None:
        if isinstance(other, Functions):
            for function in other.values():
                self._merge_function(function)
        else:
            self._merge_function(other)

    def _merge_function(self, incoming: Function | FunctionNameDecl | FunctionCount) -> None:
        existing = self._entries.get(incoming.name)
        if existing is not None:
            existing.try_merge(incoming)
            return
        if isinstance(incoming, Function):
            self._entries[incoming.name] = copy.copy(incoming)
        elif isinstance(incoming, FunctionNameDecl):
            self._entries[incoming.name] = Function(incoming.name, line_number=incoming.line)
        else:
            self._entries[incoming.name] = Function(incoming.name, execution_count=incoming.count)


# =============================================================================
# Branches
# =============================================================================


class BranchUnit(NamedTuple):
    """Identity of a branch within one line."""

    block: int
    branch: int

    def __str__(self) -> str:
        return f"{self.block}-{self.branch}"


@dataclass(eq=False, slots=True)
class Branch:
    """One branch outcome. Equality is identity only: line, block and branch."""

    line_number: int
    block: int
    branch: int
    execution_count: int = 0

    @classmethod
    def from_record(cls, data: BranchData) -> Branch:
        return cls(data.line, data.block, data.branch, data.taken_count)

    @property
    def unit(self) -> BranchUnit:
        return BranchUnit(self.block, self.branch)

    def is_hit(self) -> bool:
        return self.execution_count > 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (Branch, BranchData)):
            return NotImplemented
        other_line = other.line_number if isinstance(other, Branch) else other.line
        return (
            self.line_number == other_line
            and self.block == other.block
            and self.branch == other.branch
        )

    __hash__ = None  # type: ignore[assignment]

    def try_merge(self, other: Branch | BranchData) -> None:
        if self != other:
            other_line = other.line_number if isinstance(other, Branch) else other.line
            raise BranchError.mismatch(
                MergeBranch(self.line_number, self.block, self.branch),
                MergeBranch(other_line, other.block, other.branch),
            )
        if isinstance(other, Branch):
            self.execution_count += other.execution_count
        else:
            self.execution_count += other.taken_count


class BranchBlocks(Summary[BranchUnit, Branch]):
    """Branches of a single line, keyed by (block, branch)."""

    def hit_count(self) -> int:
        return sum(1 for branch in self._entries.values() if branch.is_hit())

    def found_count(self) -> int:
        return len(self._entries)

    def try_merge(self, other: BranchData | BranchBlocks) -> None:
        if isinstance(other, BranchBlocks):
            for branch in other.values():
                self._merge_branch(branch.unit, branch)
        else:
            self._merge_branch(BranchUnit(other.block, other.branch), other)

    def _merge_branch(self, unit: BranchUnit, incoming: Branch | BranchData) -> None:
        existing = self._entries.get(unit)
        if existing is None:
            if isinstance(incoming, Branch):
                self._entries[unit] = copy.copy(incoming)
            else:
                self._entries[unit] = Branch.from_record(incoming)
            return
        existing.try_merge(incoming)


class Branches(Summary[int, BranchBlocks]):
    """Branches of one test, grouped by line number."""

    def hit_count(self) -> int:
        return sum(blocks.hit_count() for blocks in self._entries.values())

    def found_count(self) -> int:
        return sum(blocks.found_count() for blocks in self._entries.values())

    def iter_branches(self) -> Iterator[Branch]:
        """Every branch, ordered by line then (block, branch)."""
        for line_number in self:
            yield from self._entries[line_number].values()

    def try_merge(self, other: BranchData | Branches) -> None:
        if isinstance(other, Branches):
            for line_number, blocks in other.items():
                self._blocks(line_number).try_merge(blocks)
        else:
            self._blocks(other.line).try_merge(other)

    def _blocks(self, line_number: int) -> BranchBlocks:
        blocks = self._entries.get(line_number)
        if blocks is None:
            blocks = self._entries[line_number] = BranchBlocks()
        return blocks


# =============================================================================
# Tests, files and the report
# =============================================================================

DataRecord = LineData | FunctionNameDecl | FunctionCount | BranchData


@dataclass
class Test:
    """Coverage one named test observed for one source file."""

    __test__ = False

    lines: Lines = field(default_factory=Lines)
    functions: Functions = field(default_factory=Functions)
    branches: Branches = field(default_factory=Branches)

    def try_merge(self, other: Test | DataRecord) -> None:
        if isinstance(other, Test):
            self.lines.try_merge(other.lines)
            self.functions.try_merge(other.functions)
            self.branches.try_merge(other.branches)
        elif isinstance(other, LineData):
            self.lines.try_merge(other)
        elif isinstance(other, (FunctionNameDecl, FunctionCount)):
            self.functions.try_merge(other)
        elif isinstance(other, BranchData):
            self.branches.try_merge(other)
        else:
            raise TypeError(f"Cannot merge {type(other).__name__} into a Test")


class Tests(Summary[str, Test]):
    """Tests of one source file, keyed by test name ("" for unnamed)."""

    __test__ = False

    def ensure(self, name: str) -> Test:
        """Return the test called ``name``, creating an empty one if needed."""
        test = self._entries.get(name)
        if test is None:
            test = self._entries[name] = Test()
        return test

    def try_merge_record(self, name: str, record: DataRecord) -> None:
        self.ensure(name).try_merge(record)

    def try_merge(self, other: Tests) -> None:
        for name, test in other.items():
            existing = self._entries.get(name)
            if existing is None:
                self._entries[name] = copy.deepcopy(test)
                continue
            try:
                existing.try_merge(test)
            except ConflictError as e:
                e.details.setdefault("test", name)
                raise


@dataclass
class File:
    """All tests' coverage for one source file."""

    tests: Tests = field(default_factory=Tests)

    def get_test(self, name: str) -> Test | None:
        return self.tests.get(name)

    def try_merge(self, other: File) -> None:
        self.tests.try_merge(other.tests)


class Files(Summary[str, File]):
    """Source files keyed by path as written in ``SF:``."""

    def try_merge(self, path: str, file: File) -> None:
        existing = self._entries.get(path)
        if existing is None:
            self._entries[path] = copy.deepcopy(file)
        else:
            existing.try_merge(file)


class Report(Summary[str, File]):
    """Merged coverage result, keyed by source path.

    Built once from a Files tree, which it takes ownership of. Only the
    top-level mapping is read-only: the File, Tests and Lines objects it hands
    out are the live aggregates, and calling their ``try_merge*`` methods
    changes this report. Merge into a ``copy.deepcopy`` of a file to keep a
    shared report intact.
    """

    def __init__(self, files: Files | None = None) -> None:
        super().__init__()
        if files is not None:
            self._entries.update(files.items())

    @property
    def files(self) -> Mapping[str, File]:
        return self

    @property
    def summary(self) -> CoverageSummary:
        from lcovtrace.lcov.summary import summarize_report

        return summarize_report(self)

    def to_lcov(self) -> str:
        from lcovtrace.lcov.writer import format_report

        return format_report(self)

    def save_as(self, path: Path | str) -> None:
        """Write the report as LCOV text to ``path``."""
        from lcovtrace.lcov.writer import write_report

        with Path(path).open("w", encoding="utf-8", newline="\n") as output:
            write_report(self, output)

    def to_dict(self) -> dict[str, Any]:
        """Plain nested structure for JSON output."""
        return {
            path: {
                name: {
                    "lines": {
                        str(line.line_number): {
                            "count": line.execution_count,
                            "checksum": line.checksum,
                        }
                        for line in test.lines.values()
                    },
                    "functions": {
                        fn.name: {"line": fn.line_number, "count": fn.execution_count}
                        for fn in test.functions.values()
                    },
                    "branches": [
                        [b.line_number, b.block, b.branch, b.execution_count]
                        for b in test.branches.iter_branches()
                    ],
                }
                for name, test in file.tests.items()
            }
            for path, file in self.items()
        }
