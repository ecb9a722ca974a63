from __future__ import annotations

import json
import numbers
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from .errors import ConfigInvalid
from .metadata import load_class_labels
from .types import RGB

DEFAULT_CONFIDENCE_THRESHOLD = 0.5
DEFAULT_IOU_THRESHOLD = 0.45
DEFAULT_MAX_DETECTIONS = 50
DEFAULT_COLOR: RGB = (0, 255, 255)


def _check_positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ConfigInvalid(f"{name} must be an integer (got {value!r})")
    if value <= 0:
        raise ConfigInvalid(f"{name} must be > 0 (got {value})")


def _check_unit_interval(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigInvalid(f"{name} must be a number (got {value!r})")
    if not 0.0 <= float(value) <= 1.0:
        raise ConfigInvalid(f"{name} must be in [0, 1] (got {value})")


def _as_rgb(name: str, value: Any) -> RGB:
    if isinstance(value, (str, bytes)) or not isinstance(value, Sequence) or len(value) != 3:
        raise ConfigInvalid(f"{name} must be an (r, g, b) triple (got {value!r})")
    for channel in value:
        if isinstance(channel, bool) or not isinstance(channel, int) or not 0 <= channel <= 255:
            raise ConfigInvalid(f"{name} channels must be integers in [0, 255] (got {value!r})")
    return int(value[0]), int(value[1]), int(value[2])


@dataclass(frozen=True)
class GridDetectorConfig:
    """
    Immutable settings for decoding a `[1, G, G, B*5 + K]` detector output.

    Validated on construction; an instance that exists is always usable.
    """

    grid_size: int
    boxes_per_cell: int
    num_classes: int
    class_labels: Tuple[str, ...]
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
    max_detections: int = DEFAULT_MAX_DETECTIONS
    # Keyed by class label; labels without an entry use `default_color`.
    class_colors: Optional[Mapping[str, RGB]] = field(default=None, compare=False)
    default_color: RGB = DEFAULT_COLOR

    def __post_init__(self) -> None:
        _check_positive_int("grid_size", self.grid_size)
        _check_positive_int("boxes_per_cell", self.boxes_per_cell)
        _check_positive_int("num_classes", self.num_classes)
        _check_positive_int("max_detections", self.max_detections)
        for name in ("grid_size", "boxes_per_cell", "num_classes", "max_detections"):
            object.__setattr__(self, name, int(getattr(self, name)))
        _check_unit_interval("confidence_threshold", self.confidence_threshold)
        _check_unit_interval("iou_threshold", self.iou_threshold)

        if isinstance(self.class_labels, str) or not isinstance(self.class_labels, Sequence):
            raise ConfigInvalid("class_labels must be a sequence of strings")
        labels = tuple(self.class_labels)
        if any(not isinstance(label, str) for label in labels):
            raise ConfigInvalid("class_labels must contain only strings")
        if len(labels) != self.num_classes:
            raise ConfigInvalid(
                f"class_labels has {len(labels)} entries but num_classes is {self.num_classes}"
            )
        object.__setattr__(self, "class_labels", labels)
        object.__setattr__(self, "default_color", _as_rgb("default_color", self.default_color))

        if self.class_colors is not None:
            if not isinstance(self.class_colors, Mapping):
                raise ConfigInvalid("class_colors must be a mapping of label -> (r, g, b)")
            known = set(labels)
            colors: Dict[str, RGB] = {}
            for label, color in self.class_colors.items():
                if label not in known:
                    raise ConfigInvalid(f"class_colors has unknown label: {label!r}")
                colors[label] = _as_rgb(f"class_colors[{label!r}]", color)
            object.__setattr__(self, "class_colors", MappingProxyType(colors))

    @property
    def channels(self) -> int:
        return self.boxes_per_cell * 5 + self.num_classes

    @property
    def tensor_shape(self) -> Tuple[int, int, int, int]:
        return 1, self.grid_size, self.grid_size, self.channels


def _require_int(payload: Dict[str, Any], key: str) -> int:
    if key not in payload:
        raise ConfigInvalid(f"Missing required key: {key}")
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigInvalid(f"{key} must be an integer")
    return int(value)


def _optional_number(payload: Dict[str, Any], key: str, default: float) -> float:
    value = payload.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigInvalid(f"{key} must be a number")
    return float(value)


def load_detector_config(path: Path) -> GridDetectorConfig:
    """
    Load a `GridDetectorConfig` from a JSON object such as::

        {
          "grid_size": 13,
          "boxes_per_cell": 5,
          "labels_path": "labels.txt",
          "confidence_threshold": 0.5,
          "class_colors": {"bottle": [0, 200, 0]}
        }

    Labels come either inline (`class_labels`) or from `labels_path`, which is
    resolved relative to the config file. `num_classes` defaults to the label count.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigInvalid(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ConfigInvalid("Detector config must be a JSON object")

    allowed = {
        "grid_size",
        "boxes_per_cell",
        "num_classes",
        "confidence_threshold",
        "iou_threshold",
        "max_detections",
        "class_labels",
        "labels_path",
        "class_colors",
        "default_color",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ConfigInvalid(f"Unknown detector config keys: {unknown}")

    if ("class_labels" in payload) == ("labels_path" in payload):
        raise ConfigInvalid("Set exactly one of 'class_labels' or 'labels_path'")
    if "labels_path" in payload:
        labels_path = payload["labels_path"]
        if not isinstance(labels_path, str) or not labels_path.strip():
            raise ConfigInvalid("labels_path must be a non-empty string")
        labels = load_class_labels((path.parent / labels_path).resolve())
    else:
        labels = payload["class_labels"]
        if not isinstance(labels, list):
            raise ConfigInvalid("class_labels must be a list of strings")

    num_classes = _require_int(payload, "num_classes") if "num_classes" in payload else len(labels)
    max_detections = (
        _require_int(payload, "max_detections") if "max_detections" in payload else DEFAULT_MAX_DETECTIONS
    )

    colors = payload.get("class_colors")
    if colors is not None and not isinstance(colors, dict):
        raise ConfigInvalid("class_colors must be an object of label -> [r, g, b]")

    return GridDetectorConfig(
        grid_size=_require_int(payload, "grid_size"),
        boxes_per_cell=_require_int(payload, "boxes_per_cell"),
        num_classes=num_classes,
        class_labels=tuple(labels),
        confidence_threshold=_optional_number(payload, "confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD),
        iou_threshold=_optional_number(payload, "iou_threshold", DEFAULT_IOU_THRESHOLD),
        max_detections=max_detections,
        class_colors=colors,
        default_color=payload.get("default_color", DEFAULT_COLOR),
    )
