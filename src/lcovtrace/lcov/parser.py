"""LCOV trace-file parser.

Two driving modes over one grammar:

- eager: ``parse_report(text)`` / ``parse_report_file(path)`` split the whole
  input into lines and return every record, failing on the first bad line.
- lazy: ``LcovParser`` reads and parses one line per ``next()`` call, so large
  trace files never have to be held in memory.

Every line must end with ``\\n`` (a preceding ``\\r`` is tolerated). Lines that
consist only of a terminator are skipped by both modes. Anything else that is
not a well-formed record raises ParseError with the 1-based line and column
where parsing diverged.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path
from types import TracebackType
from typing import IO, AnyStr

import structlog

from lcovtrace.core.errors import ParseError
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

log = structlog.get_logger()

UINT32_MAX = 2**32 - 1

END_OF_RECORD = "end_of_record"


class _Cursor:
    """Left-to-right scanner over one line body (terminator already removed)."""

    __slots__ = ("text", "pos")

    def __init__(self, text: str, pos: int = 0) -> None:
        self.text = text
        self.pos = pos

    def fail(self, reason: str, pos: int | None = None) -> ParseError:
        column = (self.pos if pos is None else pos) + 1
        return ParseError.syntax(self.text, column, reason)

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def comma(self) -> None:
        if self.at_end() or self.text[self.pos] != ",":
            raise self.fail("expected ','")
        self.pos += 1

    def uint(self, field: str) -> int:
        start = self.pos
        while self.pos < len(self.text) and "0" <= self.text[self.pos] <= "9":
            self.pos += 1
        if self.pos == start:
            raise self.fail(f"expected unsigned integer for {field}")
        value = int(self.text[start : self.pos])
        if value > UINT32_MAX:
            raise self.fail(f"{field} out of range", pos=start)
        return value

    def rest(self, field: str, *, allow_empty: bool = False) -> str:
        value = self.text[self.pos :]
        if not value and not allow_empty:
            raise self.fail(f"expected {field}")
        newline = value.find("\n")
        if newline != -1:
            raise self.fail(f"unexpected line break in {field}", pos=self.pos + newline)
        self.pos = len(self.text)
        return value

    def finish(self) -> None:
        if not self.at_end():
            raise self.fail("unexpected trailing text")


def _test_name(cur: _Cursor) -> Record:
    return TestName(cur.rest("test name", allow_empty=True) or None)


def _source_file(cur: _Cursor) -> Record:
    return SourceFile(cur.rest("source file path"))


def _function_name(cur: _Cursor) -> Record:
    line = cur.uint("line number")
    cur.comma()
    return FunctionNameDecl(line=line, name=cur.rest("function name"))


def _function_count(cur: _Cursor) -> Record:
    count = cur.uint("execution count")
    cur.comma()
    return FunctionCount(name=cur.rest("function name"), count=count)


def _line_data(cur: _Cursor) -> Record:
    line = cur.uint("line number")
    cur.comma()
    count = cur.uint("execution count")
    checksum = None
    if not cur.at_end():
        cur.comma()
        checksum = cur.rest("checksum")
    return LineData(line=line, count=count, checksum=checksum)


def _branch_data(cur: _Cursor) -> Record:
    line = cur.uint("line number")
    cur.comma()
    block = cur.uint("block number")
    cur.comma()
    branch = cur.uint("branch number")
    cur.comma()
    taken: int | None
    if cur.text[cur.pos : cur.pos + 1] == "-":
        cur.pos += 1
        taken = None
    else:
        taken = cur.uint("taken count")
    cur.finish()
    return BranchData(line=line, block=block, branch=branch, taken=taken)


def _counter(kind: type[Record], field: str) -> Callable[[_Cursor], Record]:
    def parse(cur: _Cursor) -> Record:
        value = cur.uint(field)
        cur.finish()
        return kind(value)  # type: ignore[call-arg]

    return parse


# Checked in order; first matching prefix wins.
_PREFIXES: tuple[tuple[str, Callable[[_Cursor], Record]], ...] = (
    ("TN:", _test_name),
    ("SF:", _source_file),
    ("FN:", _function_name),
    ("FNDA:", _function_count),
    ("FNF:", _counter(FunctionsFound, "functions found")),
    ("FNH:", _counter(FunctionsHit, "functions hit")),
    ("DA:", _line_data),
    ("LF:", _counter(LinesFound, "lines found")),
    ("LH:", _counter(LinesHit, "lines hit")),
    ("BRDA:", _branch_data),
    ("BRF:", _counter(BranchesFound, "branches found")),
    ("BRH:", _counter(BranchesHit, "branches hit")),
)


def _strip_terminator(line: str) -> str | None:
    """Line body without its terminator, or None if it has none."""
    if not line.endswith("\n"):
        return None
    body = line[:-1]
    if body.endswith("\r"):
        body = body[:-1]
    return body


def _parse_body(body: str) -> Record:
    if body.startswith(END_OF_RECORD):
        cur = _Cursor(body, len(END_OF_RECORD))
        cur.finish()
        return EndOfRecord()
    for prefix, parse in _PREFIXES:
        if body.startswith(prefix):
            return parse(_Cursor(body, len(prefix)))
    if not body:
        raise _Cursor(body).fail("empty line")
    raise _Cursor(body).fail("unrecognized record type")


def parse_record(line: str) -> Record:
    """Parse a single terminated LCOV line into a record.

    Raises:
        ParseError: If the line is unterminated, empty or malformed.
    """
    body = _strip_terminator(line)
    if body is None:
        raise ParseError.unterminated(line)
    return _parse_body(body)


def _parse_report_line(raw: str, number: int) -> Record | None:
    """Parse one report line; None for a blank line."""
    body = _strip_terminator(raw)
    if body is None:
        raise ParseError.unterminated(raw, line=number)
    if not body:
        return None
    try:
        return _parse_body(body)
    except ParseError as e:
        raise e.at_line(number) from None


def _split_lines(text: str) -> Iterator[str]:
    """Yield lines with their terminator; a trailing fragment is yielded bare."""
    start = 0
    while start < len(text):
        end = text.find("\n", start)
        if end == -1:
            yield text[start:]
            return
        yield text[start : end + 1]
        start = end + 1


def parse_report(text: str) -> list[Record]:
    """Parse a whole trace file held in memory.

    Raises:
        ParseError: On the first malformed line, with its line number.
    """
    records: list[Record] = []
    for number, raw in enumerate(_split_lines(text), start=1):
        record = _parse_report_line(raw, number)
        if record is not None:
            records.append(record)
    return records


def parse_report_file(path: Path | str, *, encoding: str = "utf-8") -> list[Record]:
    """Read and eagerly parse a trace file.

    Raises:
        OSError: If the file cannot be read.
        ParseError: If the file is not valid LCOV in ``encoding``.
    """
    log.debug("lcov.parse.start", path=str(path), mode="eager")
    data = Path(path).read_bytes()
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as e:
        line = data.count(b"\n", 0, e.start) + 1
        line_start = data.rfind(b"\n", 0, e.start) + 1
        line_end = data.find(b"\n", e.start)
        raw = data[line_start : line_end + 1 if line_end != -1 else len(data)]
        raise ParseError.decode(
            raw, encoding, e.reason, line=line, offset=e.start - line_start
        ) from e
    records = parse_report(text)
    log.debug("lcov.parse.done", path=str(path), records=len(records))
    return records


def each_record(text: str, callback: Callable[[Record], object]) -> None:
    """Parse ``text`` and hand every record to ``callback`` in order."""
    for record in parse_report(text):
        callback(record)


class LcovParser:
    """Streaming parser: one line read and parsed per ``next()`` call.

    Works over text or binary streams. Binary lines are decoded one at a time
    with ``encoding``. The stream position is only advanced as far as the
    records handed out, so a caller may stop at any point.

    Example:
        with LcovParser.from_file("coverage/lcov.info") as parser:
            for record in parser:
                ...
    """

    def __init__(self, stream: IO[AnyStr], *, encoding: str = "utf-8", owns_stream: bool = False) -> None:
        self._stream = stream
        self._encoding = encoding
        self._owns_stream = owns_stream
        self.line_number = 0

    @classmethod
    def from_file(cls, path: Path | str, *, encoding: str = "utf-8") -> LcovParser:
        """Open ``path`` for streaming; the parser closes it.

        Raises:
            OSError: If the file cannot be opened.
        """
        return cls(Path(path).open("rb"), encoding=encoding, owns_stream=True)

    def next(self) -> Record | None:
        """Next record, or None once the input is exhausted.

        Raises:
            ParseError: If the next non-blank line is malformed.
        """
        while True:
            raw = self._stream.readline()
            if not raw:
                return None
            self.line_number += 1
            if isinstance(raw, bytes):
                try:
                    text = raw.decode(self._encoding)
                except UnicodeDecodeError as e:
                    raise ParseError.decode(
                        raw, self._encoding, e.reason, line=self.line_number, offset=e.start
                    ) from e
            else:
                text = raw
            record = _parse_report_line(text, self.line_number)
            if record is not None:
                return record

    def __iter__(self) -> Iterator[Record]:
        return self

    def __next__(self) -> Record:
        record = self.next()
        if record is None:
            raise StopIteration
        return record

    def close(self) -> None:
        if self._owns_stream:
            self._stream.close()

    def __enter__(self) -> LcovParser:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
