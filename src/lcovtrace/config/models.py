"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (LCOVTRACE__SECTION__KEY)
3. YAML config file (./.lcovtrace.yaml or an explicit path)
4. Built-in defaults (this file)

Environment Variable Format:
    LCOVTRACE__<SECTION>__<KEY>=<VALUE>

Examples:
    LCOVTRACE__LOGGING__LEVEL=DEBUG
    LCOVTRACE__PARSER__ENCODING=latin-1
    LCOVTRACE__MERGE__ORPHAN_RECORDS=ignore
"""

import codecs
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
OrphanPolicy = Literal["attribute", "ignore"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        LCOVTRACE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. DEBUG logs every trace file and section.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ParserConfig(BaseModel):
    """Trace file reading.

    Env vars:
        LCOVTRACE__PARSER__ENCODING: Text encoding of trace files
    """

    encoding: str = Field(
        default="utf-8",
        description="Encoding used to decode trace files read from disk.",
    )

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v


class MergeConfig(BaseModel):
    """Merge engine behavior.

    Env vars:
        LCOVTRACE__MERGE__ORPHAN_RECORDS: attribute | ignore
    """

    orphan_records: OrphanPolicy = Field(
        default="attribute",
        description="Data records seen before any TN: line. 'attribute' files them "
        "under the empty test name, 'ignore' drops them.",
    )


class LcovTraceConfig(BaseModel):
    """Root configuration."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    parser: ParserConfig = Field(default_factory=ParserConfig)
    merge: MergeConfig = Field(default_factory=MergeConfig)
