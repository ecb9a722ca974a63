from __future__ import annotations

import argparse
import dataclasses
import logging
from pathlib import Path

import numpy as np

from grid_kit import DetectionEngine, load_detector_config


def main() -> int:
    parser = argparse.ArgumentParser(description="Decode a saved grid detector output (.npy) into ranked detections.")
    parser.add_argument("--tensor", required=True, help="Path to a .npy file holding the raw [1, G, G, B*5+K] output.")
    parser.add_argument("--config", required=True, help="Path to the detector config JSON.")
    parser.add_argument("--conf", type=float, default=None, help="Override the confidence threshold.")
    parser.add_argument("--iou", type=float, default=None, help="Override the IoU threshold for NMS.")
    parser.add_argument("--max-det", type=int, default=None, help="Override the max detections cap.")
    parser.add_argument("--pixels", default=None, help='Also print pixel corners for an image size "WxH", e.g. "640x480".')
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    image_size = None
    if args.pixels:
        parts = str(args.pixels).lower().split("x")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError('--pixels must look like "640x480"')
        image_size = (int(parts[0]), int(parts[1]))

    cfg = load_detector_config(Path(args.config))
    overrides = {}
    if args.conf is not None:
        overrides["confidence_threshold"] = float(args.conf)
    if args.iou is not None:
        overrides["iou_threshold"] = float(args.iou)
    if args.max_det is not None:
        overrides["max_detections"] = int(args.max_det)
    if overrides:
        cfg = dataclasses.replace(cfg, **overrides)

    tensor_path = Path(args.tensor)
    if not tensor_path.exists():
        raise FileNotFoundError(f"Tensor file not found: {tensor_path}")
    tensor = np.load(tensor_path)

    engine = DetectionEngine(cfg)
    detections = engine(tensor)

    for det in detections:
        line = f"{det.class_label} {det.confidence:.4f} {tuple(round(v, 4) for v in det.as_xywh())}"
        if image_size is not None:
            line += f" px={tuple(round(v, 1) for v in det.to_pixels(*image_size))}"
        print(line)
    print(f"detections={len(detections)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
