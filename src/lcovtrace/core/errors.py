"""lcovtrace error types with typed error codes.

Error code ranges:
- 1xxx: Parse
- 2xxx: Merge / conflict
- 3xxx: Config
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Parse (1xxx)
    PARSE_SYNTAX_ERROR = 1001
    PARSE_UNTERMINATED_LINE = 1002
    PARSE_DECODE_ERROR = 1003

    # Merge / conflict (2xxx)
    CHECKSUM_EMPTY = 2001
    CHECKSUM_MISMATCH = 2002
    FUNCTION_MISMATCH = 2003
    BRANCH_MISMATCH = 2004
    MERGE_IO_ERROR = 2101
    MERGE_PARSE_ERROR = 2102
    MERGE_CONFLICT = 2103
    MERGE_STRUCTURE_ERROR = 2104

    # Config (3xxx)
    CONFIG_PARSE_ERROR = 3001
    CONFIG_INVALID_VALUE = 3002

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class LcovTraceError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'CHECKSUM_MISMATCH')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ParseError(LcovTraceError):
    """Malformed LCOV line.

    ``details`` always carries ``line`` (1-based, None when a single record
    was parsed outside of a report), ``column`` (1-based) and ``text``.
    """

    @property
    def line(self) -> int | None:
        return self.details.get("line")

    @property
    def column(self) -> int:
        return int(self.details["column"])

    @property
    def text(self) -> str:
        return str(self.details["text"])

    @classmethod
    def syntax(cls, text: str, column: int, reason: str, line: int | None = None) -> "ParseError":
        where = f"line {line}, column {column}" if line is not None else f"column {column}"
        return cls(
            code=ErrorCode.PARSE_SYNTAX_ERROR,
            message=f"Invalid LCOV record at {where}: {reason}: {text!r}",
            details={"line": line, "column": column, "text": text, "reason": reason},
        )

    @classmethod
    def unterminated(cls, text: str, line: int | None = None) -> "ParseError":
        column = len(text) + 1
        where = f"line {line}, column {column}" if line is not None else f"column {column}"
        return cls(
            code=ErrorCode.PARSE_UNTERMINATED_LINE,
            message=f"Missing line terminator at {where}: {text!r}",
            details={
                "line": line,
                "column": column,
                "text": text,
                "reason": "expected line terminator",
            },
        )

    @classmethod
    def decode(
        cls,
        raw: bytes,
        encoding: str,
        reason: str,
        line: int | None = None,
        offset: int = 0,
    ) -> "ParseError":
        """Undecodable bytes; ``offset`` is the failing byte's index within ``raw``."""
        column = len(raw[:offset].decode(encoding, errors="replace")) + 1
        return cls(
            code=ErrorCode.PARSE_DECODE_ERROR,
            message=f"Cannot decode line {line}, column {column} as {encoding}: {reason}",
            details={
                "line": line,
                "column": column,
                "text": raw.decode(encoding, errors="replace").rstrip("\r\n"),
                "reason": reason,
            },
        )

    def at_line(self, line: int) -> "ParseError":
        """Copy of this error attributed to a report line number."""
        details = {**self.details, "line": line}
        text = details["text"]
        column = details["column"]
        return type(self)(
            code=self.code,
            message=f"Invalid LCOV record at line {line}, column {column}: "
            f"{details['reason']}: {text!r}",
            retryable=self.retryable,
            details=details,
        )


@dataclass(frozen=True, slots=True)
class MergeLine:
    """Identity of a line involved in a checksum conflict."""

    line: int
    checksum: str | None


@dataclass(frozen=True, slots=True)
class MergeBranch:
    """Identity of a branch involved in a branch conflict."""

    line: int
    block: int
    branch: int


class ConflictError(LcovTraceError):
    """Two coverage entries that should merge cannot be reconciled."""


class ChecksumError(ConflictError):
    """Line checksums prevent a merge."""

    @classmethod
    def empty(cls, existing: MergeLine, incoming: MergeLine) -> "ChecksumError":
        return cls(
            code=ErrorCode.CHECKSUM_EMPTY,
            message=f"Line {incoming.line} has no checksum but the merged line "
            f"carries {existing.checksum!r}",
            details={"existing": existing, "incoming": incoming},
        )

    @classmethod
    def mismatch(cls, existing: MergeLine, incoming: MergeLine) -> "ChecksumError":
        return cls(
            code=ErrorCode.CHECKSUM_MISMATCH,
            message=f"Checksum mismatch: line {existing.line} ({existing.checksum!r}) "
            f"vs line {incoming.line} ({incoming.checksum!r})",
            details={"existing": existing, "incoming": incoming},
        )


class FunctionError(ConflictError):
    """Function identities disagree."""

    @classmethod
    def mismatch(cls, existing: str, incoming: str) -> "FunctionError":
        return cls(
            code=ErrorCode.FUNCTION_MISMATCH,
            message=f"Function mismatch: {existing!r} vs {incoming!r}",
            details={"existing": existing, "incoming": incoming},
        )


class BranchError(ConflictError):
    """Branch identities disagree."""

    @classmethod
    def mismatch(cls, existing: MergeBranch, incoming: MergeBranch) -> "BranchError":
        return cls(
            code=ErrorCode.BRANCH_MISMATCH,
            message=f"Branch mismatch: {existing.line}:{existing.block}-{existing.branch} "
            f"vs {incoming.line}:{incoming.block}-{incoming.branch}",
            details={"existing": existing, "incoming": incoming},
        )


class MergeError(LcovTraceError):
    """Merging a set of trace files failed.

    Always raised ``from`` the underlying OSError, ParseError or ConflictError.
    """

    @property
    def path(self) -> str | None:
        return self.details.get("path")

    @classmethod
    def io(cls, path: str, exc: OSError) -> "MergeError":
        return cls(
            code=ErrorCode.MERGE_IO_ERROR,
            message=f"Cannot read {path}: {exc.strerror or exc}",
            details={"path": path, "errno": exc.errno},
        )

    @classmethod
    def parse(cls, path: str, err: ParseError) -> "MergeError":
        return cls(
            code=ErrorCode.MERGE_PARSE_ERROR,
            message=f"{path}: {err.message}",
            details={"path": path, "line": err.line, "column": err.column, "text": err.text},
        )

    @classmethod
    def conflict(
        cls,
        path: str,
        source_file: str | None,
        test_name: str | None,
        err: ConflictError,
    ) -> "MergeError":
        return cls(
            code=ErrorCode.MERGE_CONFLICT,
            message=f"{path}: {source_file} [test {test_name!r}]: {err.message}",
            details={
                "path": path,
                "source_file": source_file,
                "test_name": test_name,
                "conflict": err.error_name,
                **err.details,
            },
        )

    @classmethod
    def structure(cls, path: str, line: int, reason: str) -> "MergeError":
        return cls(
            code=ErrorCode.MERGE_STRUCTURE_ERROR,
            message=f"{path}:{line}: {reason}",
            details={"path": path, "line": line, "reason": reason},
        )


class ConfigError(LcovTraceError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )


class InternalError(LcovTraceError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
