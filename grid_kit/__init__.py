"""
Decoding and suppression for grid-based (YOLO v2 style) detector outputs.

Takes the raw `[1, G, G, B*5 + K]` tensor a model runtime emits and returns a
ranked, deduplicated list of detections in normalized viewport coordinates.
Only NumPy is required; model execution and drawing stay with the caller.
"""

from .types import Detection, Proposal
from .errors import ConfigInvalid, ShapeMismatch
from .config import GridDetectorConfig, load_detector_config
from .metadata import load_class_labels
from .palette import ColorTable, palette_color
from .decode import as_grid, decode
from .nms import box_iou, iou, suppress
from .engine import DetectionEngine, infer_detections
from .runtime import FramePipeline

__all__ = [
    "Detection",
    "Proposal",
    "ConfigInvalid",
    "ShapeMismatch",
    "GridDetectorConfig",
    "load_detector_config",
    "load_class_labels",
    "ColorTable",
    "palette_color",
    "as_grid",
    "decode",
    "box_iou",
    "iou",
    "suppress",
    "DetectionEngine",
    "infer_detections",
    "FramePipeline",
]
