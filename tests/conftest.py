"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local lcovtrace package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of lcovtrace modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("lcovtrace"):
        del sys.modules[module_name]


SAMPLE_TRACE = """\
TN:unit
SF:/src/app.c
FN:3,main
FN:10,helper
FNDA:1,main
FNDA:0,helper
FNF:2
FNH:1
BRDA:5,0,0,1
BRDA:5,0,1,-
BRF:2
BRH:1
DA:3,1
DA:4,1
DA:5,1
DA:10,0
LF:4
LH:3
end_of_record
"""


@pytest.fixture
def sample_trace() -> str:
    """A small but complete trace file: functions, branches and lines."""
    return SAMPLE_TRACE


@pytest.fixture
def write_trace(tmp_path: Path):
    """Write trace text to a file under tmp_path and return its path."""

    def _write(name: str, text: str) -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path

    return _write
