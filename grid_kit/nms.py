from __future__ import annotations

import numbers
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .config import DEFAULT_IOU_THRESHOLD, DEFAULT_MAX_DETECTIONS
from .types import Detection, Proposal


@dataclass
class NMSConfig:
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
    max_detections: int = DEFAULT_MAX_DETECTIONS

    def __post_init__(self) -> None:
        if isinstance(self.max_detections, bool) or not isinstance(self.max_detections, numbers.Integral):
            raise ValueError(f"max_detections must be an integer (got {self.max_detections!r})")
        if self.max_detections < 1:
            raise ValueError(f"max_detections must be >= 1 (got {self.max_detections})")
        if not 0.0 <= float(self.iou_threshold) <= 1.0:
            raise ValueError(f"iou_threshold must be in [0, 1] (got {self.iou_threshold})")


def _cxcywh_to_xyxy(boxes: np.ndarray) -> np.ndarray:
    cx, cy, w, h = boxes.T
    return np.stack([cx - w / 2, cy - h / 2, cx + w / 2, cy + h / 2], axis=1)


def box_iou(box: np.ndarray, boxes: np.ndarray) -> np.ndarray:
    """
    IoU of one `(cx, cy, w, h)` box against `(N, 4)` boxes in the same format.

    Boxes with non-positive width or height count as area 0. A degenerate
    intersection or a non-positive union gives IoU 0.
    """

    a = _cxcywh_to_xyxy(np.asarray(box, dtype=np.float64).reshape(1, 4))[0]
    bs = _cxcywh_to_xyxy(np.asarray(boxes, dtype=np.float64).reshape(-1, 4))

    left = np.maximum(a[0], bs[:, 0])
    top = np.maximum(a[1], bs[:, 1])
    right = np.minimum(a[2], bs[:, 2])
    bottom = np.minimum(a[3], bs[:, 3])

    w = np.maximum(0.0, right - left)
    h = np.maximum(0.0, bottom - top)
    inter = w * h

    area_a = max(0.0, a[2] - a[0]) * max(0.0, a[3] - a[1])
    area_b = np.maximum(0.0, bs[:, 2] - bs[:, 0]) * np.maximum(0.0, bs[:, 3] - bs[:, 1])
    union = area_a + area_b - inter

    iou = np.zeros_like(inter)
    np.divide(inter, union, out=iou, where=union > 0)
    return iou


def iou(a, b) -> float:
    """IoU of two objects exposing center_x, center_y, width and height."""
    return float(
        box_iou(
            np.array([a.center_x, a.center_y, a.width, a.height]),
            np.array([[b.center_x, b.center_y, b.width, b.height]]),
        )[0]
    )


def rank_order(proposals: Sequence[Proposal]) -> List[int]:
    """
    Indices of `proposals` by confidence descending.

    Equal confidences fall back to ascending `scan_index`, so the ranking does
    not depend on the order the caller passed them in.
    """

    return sorted(range(len(proposals)), key=lambda i: (-proposals[i].final_confidence, proposals[i].scan_index))


def suppress(
    proposals: Sequence[Proposal],
    iou_threshold: float = DEFAULT_IOU_THRESHOLD,
    max_detections: int = DEFAULT_MAX_DETECTIONS,
) -> List[Detection]:
    """
    Per-class non-maximum suppression with a result cap.

    A proposal removes every lower-ranked proposal of the same class whose IoU
    with it is above `iou_threshold`. Different classes never suppress each other.
    A kept zero-area box only removes exact copies of itself.
    Stops as soon as `max_detections` have been accepted; the output is sorted
    by confidence descending.
    """

    cfg = NMSConfig(iou_threshold=iou_threshold, max_detections=max_detections)
    if not proposals:
        return []

    order = rank_order(proposals)
    ranked = [proposals[i] for i in order]
    boxes = np.array([[p.center_x, p.center_y, p.width, p.height] for p in ranked], dtype=np.float64)
    class_ids = np.array([p.class_index for p in ranked], dtype=np.int64)
    suppressed = np.zeros(len(ranked), dtype=bool)

    keep: List[Detection] = []
    for i, p in enumerate(ranked):
        if len(keep) >= cfg.max_detections:
            break
        if suppressed[i]:
            continue
        keep.append(Detection.from_proposal(p))

        later = np.arange(i + 1, len(ranked))
        later = later[(class_ids[later] == class_ids[i]) & ~suppressed[later]]
        if later.size == 0:
            continue
        overlap = box_iou(boxes[i], boxes[later])
        dup = overlap > cfg.iou_threshold
        if boxes[i, 2] <= 0 or boxes[i, 3] <= 0:
            # Zero-area boxes have IoU 0; only exact copies of a kept one are dropped.
            dup |= np.all(boxes[later] == boxes[i], axis=1)
        suppressed[later[dup]] = True

    return keep
