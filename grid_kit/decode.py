from __future__ import annotations

from typing import List, Optional

import numpy as np

from .config import GridDetectorConfig
from .errors import ShapeMismatch
from .palette import ColorTable
from .types import Proposal


def as_grid(tensor, cfg: GridDetectorConfig) -> np.ndarray:
    """
    Validate a raw output once and return it as a `(G, G, B*5 + K)` view.

    Accepted layouts (all row-major over cy, cx, channel):
    - `(1, G, G, C)`: what the model runtime emits
    - `(G, G, C)`: batch axis already dropped
    - `(G * G * C,)`: flat read-only buffer
    """

    p = np.asarray(tensor)
    g = cfg.grid_size
    c = cfg.channels

    if p.ndim == 1:
        if p.size != g * g * c:
            raise ShapeMismatch(
                f"Flat output has {p.size} values, expected {g * g * c} for grid {g}x{g} with {c} channels."
            )
        return p.reshape(g, g, c)

    if p.ndim == 4:
        if p.shape[0] != 1:
            raise ShapeMismatch(f"Batch > 1 is not supported (got shape {p.shape}). Pass one frame at a time.")
        p = p[0]

    if p.ndim != 3:
        raise ShapeMismatch(f"Unsupported output shape: {p.shape}")
    if p.shape[2] != c:
        raise ShapeMismatch(
            f"Output has {p.shape[2]} channels, expected {c} "
            f"({cfg.boxes_per_cell} boxes * 5 + {cfg.num_classes} classes)."
        )
    if p.shape[0] != g or p.shape[1] != g:
        raise ShapeMismatch(f"Output grid is {p.shape[0]}x{p.shape[1]}, expected {g}x{g}.")
    return p


def decode(tensor, cfg: GridDetectorConfig, colors: Optional[ColorTable] = None) -> List[Proposal]:
    """
    Decode one grid output into thresholded proposals, in grid scan order.

    Per box slot b of cell (cy, cx) the channels `5*b .. 5*b+4` hold
    `(tx, ty, tw, th, objectness)`; the last `num_classes` channels are the class
    distribution shared by every slot of that cell.

    A slot survives only if `objectness > threshold` and
    `objectness * best_class_prob > threshold`. Geometry is not clamped.
    """

    # Decode in float64: float32 exp(tw) overflows past tw ~ 88.
    grid = as_grid(tensor, cfg).astype(np.float64, copy=False)
    if colors is None:
        colors = ColorTable.from_config(cfg)

    g = cfg.grid_size
    b = cfg.boxes_per_cell
    thr = cfg.confidence_threshold

    boxes = grid[..., : b * 5].reshape(g, g, b, 5)
    class_scores = grid[..., b * 5 :]

    objectness = boxes[..., 4]
    # NaN class scores never win; argmax keeps the lowest index on ties.
    class_scores = np.where(np.isnan(class_scores), -np.inf, class_scores)
    class_ids = np.argmax(class_scores, axis=-1)
    class_conf = np.take_along_axis(class_scores, class_ids[..., None], axis=-1)[..., 0]
    with np.errstate(invalid="ignore"):
        scores = objectness * class_conf[..., None]

    keep = (objectness > thr) & (scores > thr)
    # nonzero walks the mask row-major, i.e. cy, then cx, then box slot.
    cy, cx, slot = np.nonzero(keep)
    if cy.size == 0:
        return []

    sel = boxes[cy, cx, slot]
    center_x = (sel[:, 0] + cx) / g
    center_y = (sel[:, 1] + cy) / g
    width = np.exp(sel[:, 2]) / g
    height = np.exp(sel[:, 3]) / g
    cls = class_ids[cy, cx]
    prob = class_conf[cy, cx]
    final = scores[cy, cx, slot]
    scan = (cy * g + cx) * b + slot

    proposals: List[Proposal] = []
    for i in range(cy.size):
        class_index = int(cls[i])
        proposals.append(
            Proposal(
                center_x=float(center_x[i]),
                center_y=float(center_y[i]),
                width=float(width[i]),
                height=float(height[i]),
                objectness=float(sel[i, 4]),
                class_prob=float(prob[i]),
                final_confidence=float(final[i]),
                class_index=class_index,
                class_label=cfg.class_labels[class_index],
                display_color=colors.color_for(class_index),
                scan_index=int(scan[i]),
            )
        )
    return proposals
