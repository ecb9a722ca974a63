from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, List

if TYPE_CHECKING:
    from .engine import DetectionEngine
    from .types import Detection


class FramePipeline:
    """
    Per-frame glue: model runtime -> detection engine.

    `infer_fn` is whatever runs the model and returns the raw grid output for a
    frame; the pipeline does not load models or touch the camera.
    """

    def __init__(self, infer_fn: Callable[[Any], Any], engine: "DetectionEngine"):
        self._infer_fn = infer_fn
        self.engine = engine

    def __call__(self, frame: Any) -> List["Detection"]:
        preds = self._infer_fn(frame)
        return self.engine.infer_detections(preds)
