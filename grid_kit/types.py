from dataclasses import dataclass
from typing import Tuple

RGB = Tuple[int, int, int]


@dataclass
class Proposal:
    """
    Candidate box produced by the grid decoder, before suppression.

    Coordinates are center/size in normalized viewport space. `scan_index` is the
    position of the box slot in grid scan order (cy, then cx, then box slot).
    """

    center_x: float
    center_y: float
    width: float
    height: float
    objectness: float
    class_prob: float
    final_confidence: float
    class_index: int
    class_label: str
    display_color: RGB
    scan_index: int = 0


@dataclass(frozen=True)
class Detection:
    """
    Final detection handed to the rendering side.
    """

    center_x: float
    center_y: float
    width: float
    height: float
    confidence: float
    class_index: int
    class_label: str
    display_color: RGB

    def as_xywh(self) -> Tuple[float, float, float, float]:
        return self.center_x, self.center_y, self.width, self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        half_w = self.width / 2
        half_h = self.height / 2
        return (
            self.center_x - half_w,
            self.center_y - half_h,
            self.center_x + half_w,
            self.center_y + half_h,
        )

    def to_pixels(self, image_width: int, image_height: int) -> Tuple[float, float, float, float]:
        """Corner coordinates scaled to an image of the given size (not clipped)."""
        x1, y1, x2, y2 = self.as_xyxy()
        return x1 * image_width, y1 * image_height, x2 * image_width, y2 * image_height

    @classmethod
    def from_proposal(cls, p: Proposal) -> "Detection":
        return cls(
            center_x=float(p.center_x),
            center_y=float(p.center_y),
            width=float(p.width),
            height=float(p.height),
            confidence=float(p.final_confidence),
            class_index=int(p.class_index),
            class_label=p.class_label,
            display_color=p.display_color,
        )
