from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Optional, Sequence, Tuple

import numpy as np

from .types import RGB

if TYPE_CHECKING:
    from .config import GridDetectorConfig

_PALETTE: Tuple[RGB, ...] = (
    (255, 56, 56),
    (255, 157, 151),
    (255, 112, 31),
    (255, 178, 29),
    (207, 210, 49),
    (72, 249, 10),
    (146, 204, 23),
    (61, 219, 134),
    (26, 147, 52),
    (0, 212, 187),
    (44, 153, 168),
    (0, 194, 255),
    (52, 69, 147),
    (100, 115, 255),
    (0, 24, 236),
    (132, 56, 255),
    (82, 0, 133),
    (203, 56, 255),
    (255, 149, 200),
    (255, 55, 199),
)


def palette_color(class_index: int) -> RGB:
    """
    Deterministic RGB color for a class index.

    Small fixed palette, then a seeded RNG for larger indices.
    """

    if 0 <= class_index < len(_PALETTE):
        return _PALETTE[class_index]

    rng = np.random.default_rng(abs(int(class_index)))
    rgb = rng.integers(0, 256, size=3, dtype=np.uint8)
    return int(rgb[0]), int(rgb[1]), int(rgb[2])


class ColorTable:
    """
    Fixed-size color table indexed by class index.

    `color_for` never fails: indices outside the table get the default entry.
    """

    def __init__(self, colors: Sequence[RGB], default: RGB):
        self._colors = tuple(colors)
        self.default = default

    def __len__(self) -> int:
        return len(self._colors)

    def color_for(self, class_index: int) -> RGB:
        if 0 <= class_index < len(self._colors):
            return self._colors[class_index]
        return self.default

    @classmethod
    def from_labels(
        cls,
        class_labels: Sequence[str],
        class_colors: Optional[Mapping[str, RGB]],
        default: RGB,
    ) -> "ColorTable":
        colors = class_colors or {}
        return cls([colors.get(label, default) for label in class_labels], default)

    @classmethod
    def from_config(cls, cfg: "GridDetectorConfig") -> "ColorTable":
        return cls.from_labels(cfg.class_labels, cfg.class_colors, cfg.default_color)

    @classmethod
    def from_palette(cls, num_classes: int, default: RGB = (0, 255, 255)) -> "ColorTable":
        return cls([palette_color(i) for i in range(num_classes)], default)
