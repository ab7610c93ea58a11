"""Core module exports."""

from lcovtrace.core.errors import (
    BranchError,
    ChecksumError,
    ConfigError,
    ConflictError,
    ErrorCode,
    FunctionError,
    InternalError,
    LcovTraceError,
    MergeBranch,
    MergeError,
    MergeLine,
    ParseError,
)
from lcovtrace.core.logging import configure_logging, get_log_file_path, get_logger

__all__ = [
    # Errors
    "BranchError",
    "ChecksumError",
    "ConfigError",
    "ConflictError",
    "ErrorCode",
    "FunctionError",
    "InternalError",
    "LcovTraceError",
    "MergeBranch",
    "MergeError",
    "MergeLine",
    "ParseError",
    # Logging
    "configure_logging",
    "get_log_file_path",
    "get_logger",
]
