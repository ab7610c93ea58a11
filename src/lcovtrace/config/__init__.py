"""Config module exports."""

from lcovtrace.config.loader import load_config
from lcovtrace.config.models import (
    LcovTraceConfig,
    LoggingConfig,
    LogOutputConfig,
    MergeConfig,
    ParserConfig,
)

__all__ = [
    "load_config",
    "LcovTraceConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "MergeConfig",
    "ParserConfig",
]
