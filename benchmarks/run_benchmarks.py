from __future__ import annotations

import argparse
import json
import pathlib
import sys

from rsqrtbench import Provider
from rsqrtbench_cli.runners.common import ExternalProviderUnavailable, build_export_payload, run_benchmark

"""Simple batch benchmark driver.

Repeats the full three-pass benchmark a few times with consecutive seeds and
writes every run's summary to `results/bench_summary.json`.
"""

HERE = pathlib.Path(__file__).parent
RESULTS = HERE.parent / "results"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the rsqrt benchmark several times.")
    parser.add_argument(
        "--repeats",
        type=int,
        default=3,
        help="Number of full benchmark runs (default: 3).",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=1_000_000,
        help="Inputs per run (default: 1000000).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed of the first run; later runs use seed+1, seed+2, ...",
    )
    parser.add_argument(
        "--out",
        type=pathlib.Path,
        default=RESULTS / "bench_summary.json",
        help="Output JSON path.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    runs = []
    for k in range(args.repeats):
        try:
            summary = run_benchmark(args.samples, seed=args.seed + k)
        except ExternalProviderUnavailable as exc:
            print(f"Error: {exc}", file=sys.stderr)
            raise SystemExit(1)
        runs.append(build_export_payload(summary))
        inline = summary.timing(Provider.INLINE).average
        native = summary.timing(Provider.NATIVE).average
        ratio = inline / native if native else float("nan")
        print(f"run {k + 1}/{args.repeats}: Inline/Native mean time ratio {ratio:.2f}")
    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_text(json.dumps(runs, indent=2))
    print(f"Wrote {args.out}")

if __name__ == "__main__":
    main()
