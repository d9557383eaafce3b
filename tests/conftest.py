from __future__ import annotations

import sys
from pathlib import Path


# Run the tests against this checkout's src/ tree rather than any installed
# `ghircbot` distribution.
_REPO_ROOT = Path(__file__).resolve().parent.parent
_SRC = _REPO_ROOT / "src"
if str(_SRC) not in sys.path:
    sys.path.insert(0, str(_SRC))
