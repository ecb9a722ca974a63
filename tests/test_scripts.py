import io
import json
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest import mock

import numpy as np

from grid_kit import GridDetectorConfig, decode
from Scripts import benchmark_nms, decode_tensor


class TestBenchmarkHelpers(unittest.TestCase):
    def test_percentile_interpolates(self) -> None:
        values = [1.0, 2.0, 3.0, 4.0]
        self.assertEqual(benchmark_nms._percentile(values, 0.0), 1.0)
        self.assertEqual(benchmark_nms._percentile(values, 100.0), 4.0)
        self.assertAlmostEqual(benchmark_nms._percentile(values, 50.0), 2.5)
        with self.assertRaises(ValueError):
            benchmark_nms._percentile([], 50.0)

    def test_synthetic_output_matches_config(self) -> None:
        cfg = GridDetectorConfig(
            grid_size=5, boxes_per_cell=3, num_classes=4, class_labels=("a", "b", "c", "d"), confidence_threshold=0.3
        )
        out = benchmark_nms._synthetic_output(cfg, 1.0, np.random.default_rng(0))
        self.assertEqual(out.shape, cfg.tensor_shape)
        self.assertTrue(np.allclose(out[0, :, :, 15:].sum(axis=-1), 1.0, atol=1e-5))
        for p in decode(out, cfg):
            self.assertGreater(p.final_confidence, 0.3)


class TestDecodeTensorScript(unittest.TestCase):
    def test_prints_detections(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "detector.json").write_text(
                json.dumps({"grid_size": 7, "boxes_per_cell": 2, "class_labels": ["bottle", "can", "paper"]}),
                encoding="utf-8",
            )
            out = np.zeros((1, 7, 7, 13), dtype=np.float32)
            out[0, 3, 3, 0:5] = [0, 0, 0, 0, 0.95]
            out[0, 3, 3, 10:13] = [0.9, 0.05, 0.05]
            np.save(root / "out.npy", out)

            argv = [
                "decode_tensor.py",
                "--tensor",
                str(root / "out.npy"),
                "--config",
                str(root / "detector.json"),
                "--pixels",
                "700x700",
            ]
            buf = io.StringIO()
            with mock.patch("sys.argv", argv), redirect_stdout(buf):
                code = decode_tensor.main()

        self.assertEqual(code, 0)
        lines = buf.getvalue().splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith("bottle 0.8550"))
        self.assertIn("px=(250.0, 250.0, 350.0, 350.0)", lines[0])
        self.assertEqual(lines[1], "detections=1")


if __name__ == "__main__":
    unittest.main()
