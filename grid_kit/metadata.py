from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Union

from .errors import ConfigInvalid


def _parse_names_block(lines: List[str]) -> Dict[int, str]:
    names: Dict[int, str] = {}
    in_names = False
    for line in lines:
        if line == "names:":
            in_names = True
            continue
        if not in_names:
            continue

        # Parse "id: label"
        if ":" not in line:
            continue
        left, right = line.split(":", 1)
        left = left.strip()
        right = right.strip().strip("'").strip('"')
        if not left.isdigit():
            continue
        names[int(left)] = right
    return names


def load_class_labels(path: Union[str, Path]) -> List[str]:
    """
    Load an ordered list of class labels.

    Two formats are accepted:

    - a plain label file, one label per line (blank lines ignored)::

          bottle
          can
          paper

    - the lightweight metadata mapping::

          names:
            0: bottle
            1: can

    For the mapping format the ids must be contiguous from 0.
    """

    text = Path(path).read_text(encoding="utf-8")
    lines = [raw.strip() for raw in text.splitlines()]
    lines = [line for line in lines if line and not line.startswith("#")]

    if "names:" not in lines:
        return lines

    names = _parse_names_block(lines)
    expected = list(range(len(names)))
    if sorted(names) != expected:
        raise ConfigInvalid(f"Class ids in {path} must be contiguous from 0 (got {sorted(names)})")
    return [names[i] for i in expected]
