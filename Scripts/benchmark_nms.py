from __future__ import annotations

import argparse
import logging
import statistics
import time
from dataclasses import dataclass
from typing import List

import numpy as np

from grid_kit import GridDetectorConfig, decode, suppress
from grid_kit.palette import ColorTable


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    p95_ms: float


def _percentile(sorted_values: List[float], q: float) -> float:
    if not sorted_values:
        raise ValueError("No values provided.")
    if q < 0.0 or q > 100.0:
        raise ValueError("q must be in [0, 100].")
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    # Linear interpolation between closest ranks.
    pos = (q / 100.0) * (len(sorted_values) - 1)
    lo = int(np.floor(pos))
    hi = int(np.ceil(pos))
    if lo == hi:
        return float(sorted_values[lo])
    t = pos - lo
    return float(sorted_values[lo] * (1.0 - t) + sorted_values[hi] * t)


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms = [v * 1000.0 for v in values_s]
    ms_sorted = sorted(ms)
    return TimingSummary(
        n=len(ms_sorted),
        mean_ms=float(statistics.fmean(ms_sorted)) if ms_sorted else 0.0,
        p50_ms=_percentile(ms_sorted, 50.0) if ms_sorted else 0.0,
        p90_ms=_percentile(ms_sorted, 90.0) if ms_sorted else 0.0,
        p95_ms=_percentile(ms_sorted, 95.0) if ms_sorted else 0.0,
    )


def _format_summary(label: str, s: TimingSummary) -> str:
    return (
        f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms "
        f"p90={s.p90_ms:.3f}ms p95={s.p95_ms:.3f}ms"
    )


def _synthetic_output(cfg: GridDetectorConfig, fill: float, rng: np.random.Generator) -> np.ndarray:
    """Random grid output where roughly `fill` of the box slots carry a confident object."""

    g, b, k = cfg.grid_size, cfg.boxes_per_cell, cfg.num_classes
    out = np.zeros((1, g, g, b * 5 + k), dtype=np.float32)
    boxes = out[0, :, :, : b * 5].reshape(g, g, b, 5)
    boxes[..., 0:2] = rng.uniform(0.0, 1.0, size=(g, g, b, 2))
    boxes[..., 2:4] = rng.normal(0.0, 0.5, size=(g, g, b, 2))
    active = rng.uniform(0.0, 1.0, size=(g, g, b)) < fill
    boxes[..., 4] = np.where(active, rng.uniform(0.6, 1.0, size=(g, g, b)), rng.uniform(0.0, 0.3, size=(g, g, b)))
    logits = rng.normal(0.0, 2.0, size=(g, g, k))
    probs = np.exp(logits - logits.max(axis=-1, keepdims=True))
    out[0, :, :, b * 5 :] = probs / probs.sum(axis=-1, keepdims=True)
    return out


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Benchmark grid decoding and per-class NMS latency on synthetic outputs (no model needed)."
    )
    parser.add_argument("--grid", type=int, default=13, help="Grid size G.")
    parser.add_argument("--boxes", type=int, default=5, help="Box slots per cell B.")
    parser.add_argument("--classes", type=int, default=20, help="Number of classes K.")
    parser.add_argument("--fill", type=float, default=0.1, help="Fraction of box slots with a confident object.")
    parser.add_argument("--conf", type=float, default=0.3, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=0.45, help="IoU threshold for NMS.")
    parser.add_argument("--max-det", type=int, default=50, help="Max detections to keep after NMS.")
    parser.add_argument("--warmup", type=int, default=10, help="Warmup iterations to run but not record.")
    parser.add_argument("--repeats", type=int, default=200, help="Recorded iterations.")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed for the synthetic outputs.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ...).")
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")
    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")
    if not 0.0 <= args.fill <= 1.0:
        raise ValueError("--fill must be in [0, 1]")

    cfg = GridDetectorConfig(
        grid_size=int(args.grid),
        boxes_per_cell=int(args.boxes),
        num_classes=int(args.classes),
        class_labels=tuple(f"class_{i}" for i in range(int(args.classes))),
        confidence_threshold=float(args.conf),
        iou_threshold=float(args.iou),
        max_detections=int(args.max_det),
    )
    colors = ColorTable.from_palette(cfg.num_classes)
    rng = np.random.default_rng(int(args.seed))

    t_decode: List[float] = []
    t_nms: List[float] = []
    n_proposals: List[int] = []
    n_kept: List[int] = []

    for step in range(int(args.warmup) + int(args.repeats)):
        output = _synthetic_output(cfg, float(args.fill), rng)

        t0 = time.perf_counter()
        proposals = decode(output, cfg, colors)
        t1 = time.perf_counter()
        detections = suppress(proposals, cfg.iou_threshold, cfg.max_detections)
        t2 = time.perf_counter()

        if step < int(args.warmup):
            continue
        t_decode.append(t1 - t0)
        t_nms.append(t2 - t1)
        n_proposals.append(len(proposals))
        n_kept.append(len(detections))

    print(_format_summary("decode", _summarize_ms(t_decode)))
    print(_format_summary("suppress", _summarize_ms(t_nms)))
    print(
        f"grid={cfg.grid_size} boxes={cfg.boxes_per_cell} classes={cfg.num_classes} "
        f"mean_proposals={statistics.fmean(n_proposals):.1f} mean_kept={statistics.fmean(n_kept):.1f}"
    )

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
