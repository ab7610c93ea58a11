"""lcovtrace command line interface."""
