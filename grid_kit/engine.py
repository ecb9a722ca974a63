from __future__ import annotations

import logging
from typing import List

from .config import GridDetectorConfig
from .decode import decode
from .nms import suppress
from .palette import ColorTable
from .types import Detection

logger = logging.getLogger(__name__)


class DetectionEngine:
    """
    Grid decoding -> confidence filtering -> per-class NMS, one tensor per call.

    Holds only the immutable config and its color table, so one instance can be
    shared across threads as long as each call gets its own tensor.
    """

    def __init__(self, cfg: GridDetectorConfig):
        self.cfg = cfg
        self.colors = ColorTable.from_config(cfg)

    def infer_detections(self, tensor) -> List[Detection]:
        proposals = decode(tensor, self.cfg, self.colors)
        detections = suppress(proposals, self.cfg.iou_threshold, self.cfg.max_detections)
        logger.debug("decoded %d proposals, kept %d detections", len(proposals), len(detections))
        for det in detections:
            logger.debug(
                "detection: %s conf=%.3f xywh=(%.3f, %.3f, %.3f, %.3f)",
                det.class_label,
                det.confidence,
                *det.as_xywh(),
            )
        return detections

    def __call__(self, tensor) -> List[Detection]:
        return self.infer_detections(tensor)


def infer_detections(tensor, cfg: GridDetectorConfig) -> List[Detection]:
    """Decode and suppress one raw output with `cfg`."""
    return DetectionEngine(cfg).infer_detections(tensor)
