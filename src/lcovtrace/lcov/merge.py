"""Merge LCOV trace files into one Report.

The merger walks the record stream of each trace file in the order given:

- ``TN:``            selects the current test (``""`` when unnamed) and makes
                     sure it exists, even if it never logs any data
- ``SF:``            selects the current source file
- ``DA/FN/FNDA/BRDA`` merge into the current test's lines/functions/branches
- ``end_of_record``  folds the accumulated tests into the file tree under the
                     current source path and starts a fresh section
- ``LF/LH/FNF/FNH/BRF/BRH`` are ignored; totals are recomputed on output

An ``SF:`` section missing its ``end_of_record`` is folded in at end of input.
Trailing records with no ``SF:`` since the last ``end_of_record`` belong to no
file and are dropped.

Counts accumulate by addition. Line checksums guard against merging
different source revisions: a checksum mismatch, or a line without a checksum
arriving for a line that has one, aborts the whole merge. Order matters only
when checksums are partly missing (the first checksum seen wins).

No partial report is ever returned: any IO, parse or conflict error is raised
as MergeError, chained to its cause.
"""

from collections.abc import Iterable, Sequence
from pathlib import Path

import structlog

from lcovtrace.config.models import LcovTraceConfig, MergeConfig
from lcovtrace.core.errors import ConflictError, MergeError, ParseError
from lcovtrace.lcov.models import File, Files, Report, Tests
from lcovtrace.lcov.parser import LcovParser, parse_report
from lcovtrace.lcov.records import (
    COUNTER_RECORDS,
    DATA_RECORDS,
    EndOfRecord,
    Record,
    SourceFile,
    TestName,
)

log = structlog.get_logger()


class ReportMerger:
    """Folds the record streams of one or more trace files into a Report.

    One merger owns its file tree for the duration of a ``merge`` call; each
    call starts from an empty tree, so a merger can be reused.
    """

    def __init__(self, config: LcovTraceConfig | None = None) -> None:
        self._config = config or LcovTraceConfig()
        self._files = Files()
        self._reset_section_state()

    @property
    def merge_config(self) -> MergeConfig:
        return self._config.merge

    def _reset_section_state(self) -> None:
        self._test_name: str | None = None
        self._source_name: str | None = None
        self._section_source: str | None = None
        self._tests = Tests()

    def merge(self, paths: Sequence[Path | str]) -> Report:
        """Merge trace files in order.

        Raises:
            MergeError: If a file cannot be read, fails to parse, or conflicts
                        with what was merged before it.
        """
        self._files = Files()
        for path in paths:
            self.process_file(path)
        return self.build()

    def merge_text(self, *texts: str, origin: str = "<text>") -> Report:
        """Merge in-memory trace file contents, in order."""
        self._files = Files()
        for index, text in enumerate(texts, start=1):
            name = f"{origin}#{index}" if len(texts) > 1 else origin
            try:
                records = parse_report(text)
            except ParseError as e:
                raise MergeError.parse(name, e) from e
            self.process_records(records, origin=name)
        return self.build()

    def build(self) -> Report:
        """Report of everything processed so far; the merger starts over empty."""
        report = Report(self._files)
        self._files = Files()
        return report

    def process_file(self, path: Path | str) -> None:
        """Stream one trace file into the running file tree."""
        name = str(path)
        log.debug("lcov.merge.file_start", input_path=name)
        try:
            parser = LcovParser.from_file(path, encoding=self._config.parser.encoding)
        except OSError as e:
            log.error("lcov.merge.failed", input_path=name, error=str(e))
            raise MergeError.io(name, e) from e

        with parser, structlog.contextvars.bound_contextvars(input_path=name):
            try:
                self.process_records(parser, origin=name, parser=parser)
            except ParseError as e:
                log.error("lcov.merge.failed", error=str(e))
                raise MergeError.parse(name, e) from e
            except OSError as e:
                log.error("lcov.merge.failed", error=str(e))
                raise MergeError.io(name, e) from e
            except MergeError as e:
                log.error("lcov.merge.failed", error=str(e))
                raise
        log.debug("lcov.merge.file_done", input_path=name, files=len(self._files))

    def process_records(
        self,
        records: Iterable[Record],
        *,
        origin: str = "<records>",
        parser: LcovParser | None = None,
    ) -> None:
        """Apply one trace file's records to the running file tree.

        ``parser``, when given, supplies line numbers for error details.
        """
        self._reset_section_state()
        for record in records:
            if isinstance(record, TestName):
                self._on_test_name(record)
            elif isinstance(record, SourceFile):
                self._on_source_file(record)
            elif isinstance(record, DATA_RECORDS):
                self._on_data(record, origin)
            elif isinstance(record, EndOfRecord):
                line = parser.line_number if parser is not None else 0
                self._on_end_of_record(origin, line)
            elif isinstance(record, COUNTER_RECORDS):
                continue

        if self._section_source is not None:
            log.warning(
                "lcov.merge.unterminated_section",
                input_path=origin,
                source_file=self._section_source,
            )
            self._on_end_of_record(origin, parser.line_number if parser is not None else 0)
        elif len(self._tests):
            # Trailing records with no SF: of their own belong to no file.
            log.warning(
                "lcov.merge.discarded_records",
                input_path=origin,
                tests=list(self._tests),
            )
        self._reset_section_state()

    def _on_test_name(self, record: TestName) -> None:
        self._test_name = record.name or ""
        self._tests.ensure(self._test_name)

    def _on_source_file(self, record: SourceFile) -> None:
        self._source_name = record.path
        self._section_source = record.path

    def _on_data(self, record: Record, origin: str) -> None:
        test_name = self._test_name
        if test_name is None:
            if self.merge_config.orphan_records == "ignore":
                log.debug("lcov.merge.orphan_record", input_path=origin, record=repr(record))
                return
            test_name = ""
        try:
            self._tests.try_merge_record(test_name, record)  # type: ignore[arg-type]
        except ConflictError as e:
            raise MergeError.conflict(origin, self._source_name, test_name, e) from e

    def _on_end_of_record(self, origin: str, line: int) -> None:
        if self._source_name is None:
            raise MergeError.structure(origin, line, "end_of_record before any SF: record")
        file = File(self._tests)
        try:
            self._files.try_merge(self._source_name, file)
        except ConflictError as e:
            raise MergeError.conflict(origin, self._source_name, e.details.get("test"), e) from e
        self._tests = Tests()
        self._section_source = None


def merge_files(paths: Sequence[Path | str], config: LcovTraceConfig | None = None) -> Report:
    """Merge trace files on disk into one Report."""
    return ReportMerger(config).merge(paths)


def merge_reports(*texts: str, config: LcovTraceConfig | None = None) -> Report:
    """Merge trace file contents held in memory into one Report."""
    return ReportMerger(config).merge_text(*texts)
