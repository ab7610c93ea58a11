"""Tests for lcov/records.py and lcov/writer.py record formatting."""

import dataclasses

import pytest

from lcovtrace.lcov.parser import parse_record
from lcovtrace.lcov.records import (
    COUNTER_RECORDS,
    DATA_RECORDS,
    BranchData,
    EndOfRecord,
    FunctionCount,
    FunctionsFound,
    LineData,
    SourceFile,
    TestName,
)
from lcovtrace.lcov.writer import format_record

CANONICAL_LINES = [
    "TN:unit tests\n",
    "TN:\n",
    "SF:/home/user/project/src/main.c\n",
    "FN:12,main\n",
    "FNDA:3,main\n",
    "FNF:4\n",
    "FNH:2\n",
    "DA:7,0\n",
    "DA:7,12,PF4Rz2r7RTliO9u6bZ7h6g\n",
    "LF:20\n",
    "LH:15\n",
    "BRDA:4,0,1,-\n",
    "BRDA:4,0,1,7\n",
    "BRF:2\n",
    "BRH:1\n",
    "end_of_record\n",
]


class TestRecordModel:
    """Record value semantics."""

    def test_records_compare_by_value(self) -> None:
        assert LineData(1, 2, "abc") == LineData(line=1, count=2, checksum="abc")
        assert LineData(1, 2) != LineData(1, 2, "abc")
        assert EndOfRecord() == EndOfRecord()

    def test_records_are_immutable(self) -> None:
        record = SourceFile("/a.c")
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.path = "/b.c"  # type: ignore[misc]

    def test_line_checksum_defaults_to_none(self) -> None:
        assert LineData(3, 1).checksum is None

    def test_not_taken_branch_counts_as_zero(self) -> None:
        assert BranchData(1, 0, 0, None).taken_count == 0
        assert BranchData(1, 0, 0, 5).taken_count == 5

    def test_counter_and_data_record_groups_are_disjoint(self) -> None:
        assert not set(COUNTER_RECORDS) & set(DATA_RECORDS)
        assert FunctionsFound in COUNTER_RECORDS
        assert FunctionCount in DATA_RECORDS


class TestFormatRecord:
    """Canonical single-line serialization."""

    @pytest.mark.parametrize("line", CANONICAL_LINES)
    def test_canonical_line_is_reproduced(self, line: str) -> None:
        assert format_record(parse_record(line)) == line

    @pytest.mark.parametrize(
        "line",
        [
            "DA:1,2\r\n",
            "FN:1,operator,()\n",
            "TN:a:b c\n",
            "DA:0001,02\n",
        ],
    )
    def test_reparse_of_formatted_record_is_stable(self, line: str) -> None:
        record = parse_record(line)
        assert parse_record(format_record(record)) == record

    def test_empty_test_name_written_as_bare_prefix(self) -> None:
        assert format_record(TestName(None)) == "TN:\n"

    def test_non_record_rejected(self) -> None:
        with pytest.raises(TypeError):
            format_record("DA:1,1")  # type: ignore[arg-type]
