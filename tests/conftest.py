"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`carcassonne` package (e.g., `from carcassonne.api.app import app`) without
requiring an editable install in CI.  Settings read while importing the app
point at a throwaway snapshot directory.
"""

import os
import sys
import tempfile
from pathlib import Path

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

os.environ.setdefault("CARCASSONNE_DATA_DIR", tempfile.mkdtemp(prefix="carcassonne-tests-"))
