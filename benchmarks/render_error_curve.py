#!/usr/bin/env python3
"""Plot the relative error of the bit-trick square root against math.sqrt."""

from __future__ import annotations

import argparse
import math
import pathlib
from typing import Sequence

import numpy as np

try:
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt
except ImportError as exc:  # pragma: no cover
    raise SystemExit(
        "matplotlib is required for error curve rendering. Install it via 'pip install matplotlib'."
    ) from exc

from rsqrtbench import newton_step, rsqrt_estimate

plt.rcParams.update(
    {
        "axes.grid": True,
        "grid.alpha": 0.3,
        "grid.linestyle": "--",
        "legend.frameon": False,
    }
)

HERE = pathlib.Path(__file__).resolve().parent
DEFAULT_OUTPUT = HERE.parent / "results" / "rsqrt_error_curve.png"


def relative_errors(xs: Sequence[float], refine: bool) -> np.ndarray:
    out = np.empty(len(xs), dtype=np.float64)
    for k, x in enumerate(xs):
        y = rsqrt_estimate(x)
        if refine:
            y = newton_step(x, y)
        approx = float(np.float32(x) * y)
        exact = math.sqrt(float(np.float32(x)))
        out[k] = abs(approx - exact) / exact
    return out


def render(output: pathlib.Path, lo: float = 1.0, hi: float = 4.0, points: int = 1024) -> pathlib.Path:
    # One octave pair [1, 4) covers every mantissa/exponent-parity case
    xs = np.linspace(lo, hi, num=points)
    fig, ax = plt.subplots(figsize=(9, 5))
    for refine, label in ((False, "bit trick only"), (True, "one Newton-Raphson step")):
        errs = relative_errors(xs, refine) * 100.0
        ax.plot(xs, errs, "-", label=label)
        k = int(np.argmax(errs))
        ax.annotate(f"{errs[k]:.4f}%", (xs[k], errs[k]), color=ax.lines[-1].get_color())
    ax.set_xlabel("x")
    ax.set_ylabel("relative error vs math.sqrt (%)")
    ax.set_yscale("log")
    ax.set_title("Fast inverse square root error")
    ax.legend(loc="lower right")
    output.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(output, dpi=150, bbox_inches="tight")
    plt.close(fig)
    return output


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--output", type=pathlib.Path, default=DEFAULT_OUTPUT)
    parser.add_argument("--points", type=int, default=1024)
    args = parser.parse_args(argv)
    path = render(args.output, points=args.points)
    print(f"Wrote {path}")


if __name__ == "__main__":
    main()
