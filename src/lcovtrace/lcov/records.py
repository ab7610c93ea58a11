"""LCOV record model.

One record per trace-file line. The set of record kinds is closed; ``Record``
is the union of all of them.

    TN:<test name>                     TestName
    SF:<source file path>              SourceFile
    FN:<line>,<name>                   FunctionNameDecl
    FNDA:<count>,<name>                FunctionCount
    FNF:<n> / FNH:<n>                  FunctionsFound / FunctionsHit
    DA:<line>,<count>[,<checksum>]     LineData
    LF:<n> / LH:<n>                    LinesFound / LinesHit
    BRDA:<line>,<block>,<branch>,<taken>  BranchData
    BRF:<n> / BRH:<n>                  BranchesFound / BranchesHit
    end_of_record                      EndOfRecord
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class TestName:
    """``TN:`` line. ``name`` is None for an empty test name."""

    __test__ = False

    name: str | None


@dataclass(frozen=True, slots=True)
class SourceFile:
    path: str


@dataclass(frozen=True, slots=True)
class LineData:
    """``DA:`` line; execution count of one source line."""

    line: int
    count: int
    checksum: str | None = None


@dataclass(frozen=True, slots=True)
class FunctionNameDecl:
    """``FN:`` line; declares the line a function starts on."""

    line: int
    name: str


@dataclass(frozen=True, slots=True)
class FunctionCount:
    """``FNDA:`` line; execution count of a function."""

    name: str
    count: int


@dataclass(frozen=True, slots=True)
class FunctionsFound:
    count: int


@dataclass(frozen=True, slots=True)
class FunctionsHit:
    count: int


@dataclass(frozen=True, slots=True)
class LinesFound:
    count: int


@dataclass(frozen=True, slots=True)
class LinesHit:
    count: int


@dataclass(frozen=True, slots=True)
class BranchData:
    """``BRDA:`` line.

    ``taken`` is None when the tool wrote ``-``: the block holding the branch
    was never reached.
    """

    line: int
    block: int
    branch: int
    taken: int | None

    @property
    def taken_count(self) -> int:
        """Execution count with "not taken" folded to 0."""
        return self.taken or 0


@dataclass(frozen=True, slots=True)
class BranchesFound:
    count: int


@dataclass(frozen=True, slots=True)
class BranchesHit:
    count: int


@dataclass(frozen=True, slots=True)
class EndOfRecord:
    pass


Record = Union[
    TestName,
    SourceFile,
    LineData,
    FunctionNameDecl,
    FunctionCount,
    FunctionsFound,
    FunctionsHit,
    LinesFound,
    LinesHit,
    BranchData,
    BranchesFound,
    BranchesHit,
    EndOfRecord,
]

# Summary counters the source tool computed itself; never trusted on input.
COUNTER_RECORDS: tuple[type, ...] = (
    FunctionsFound,
    FunctionsHit,
    LinesFound,
    LinesHit,
    BranchesFound,
    BranchesHit,
)

# Records that carry coverage data for the current test and source file.
DATA_RECORDS: tuple[type, ...] = (LineData, FunctionNameDecl, FunctionCount, BranchData)
