from __future__ import annotations

import importlib
import json
import sys
from pathlib import Path

import numpy as np
import pytest

BENCH_DIR = Path(__file__).resolve().parents[1] / "benchmarks"
if str(BENCH_DIR) not in sys.path:
    sys.path.insert(0, str(BENCH_DIR))


def test_error_curve_bounds() -> None:
    render_error_curve = importlib.import_module("render_error_curve")
    xs = np.linspace(1.0, 4.0, 257)
    raw = render_error_curve.relative_errors(xs, refine=False)
    refined = render_error_curve.relative_errors(xs, refine=True)
    assert raw.max() < 0.04
    assert refined.max() < 0.002
    assert (refined <= raw + 1e-6).all()


def test_error_curve_renders_png(tmp_path: Path) -> None:
    render_error_curve = importlib.import_module("render_error_curve")
    out = render_error_curve.render(tmp_path / "curve.png", points=64)
    assert out.exists()
    assert out.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_batch_driver_writes_every_run(stub_registry, tmp_path: Path, capsys) -> None:
    run_benchmarks = importlib.import_module("run_benchmarks")
    out = tmp_path / "bench_summary.json"
    run_benchmarks.main(["--repeats", "2", "--samples", "40", "--out", str(out)])
    runs = json.loads(out.read_text(encoding="utf-8"))
    assert len(runs) == 2
    assert [r["meta"]["seed"] for r in runs] == [0, 1]
    assert "Wrote" in capsys.readouterr().out


def test_batch_driver_exits_cleanly_without_external(registry_without_external, tmp_path: Path, capsys) -> None:
    run_benchmarks = importlib.import_module("run_benchmarks")
    out = tmp_path / "bench_summary.json"
    with pytest.raises(SystemExit) as excinfo:
        run_benchmarks.main(["--repeats", "1", "--samples", "10", "--out", str(out)])
    assert excinfo.value.code == 1
    assert "External Q_rsqrt is not available" in capsys.readouterr().err
    assert not out.exists()
