"""Make `grid_kit` and `Scripts` importable from a plain checkout."""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]

# Not every pytest import mode puts the checkout on sys.path.
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))
