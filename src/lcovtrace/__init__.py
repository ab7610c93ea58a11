"""lcovtrace - LCOV trace file parser and merger."""

__version__ = "0.1.0"
