
from __future__ import annotations
"""Benchmark harness shared by the CLI commands.

Includes adapter bootstrap, input generation, the three timed passes,
report formatting and JSON export helpers.
"""

import copy
import json
import logging
import math
import os
import pathlib
import platform
import sys
import time

from dataclasses import dataclass, field
from typing import Callable, Dict, Any, List, Mapping, Optional

import numpy as np
import psutil

_HERE = pathlib.Path(__file__).resolve()

try:
    _PROJECT_ROOT = next(p for p in _HERE.parents if (p / "libs").exists())
except StopIteration:
    _PROJECT_ROOT = _HERE.parents[0]

for rel in (
    pathlib.Path("libs/core/src"),
    pathlib.Path("libs/adapters/native/src"),
):
    candidate = _PROJECT_ROOT / rel
    if candidate.exists():
        candidate_str = str(candidate)
        if candidate_str not in sys.path:
            sys.path.append(candidate_str)

from rsqrtbench import Provider, SampleSet, SqrtFunction, registry  # noqa: E402
from rsqrtbench.metrics import AggregateStat  # noqa: E402

log = logging.getLogger(__name__)

DEFAULT_SAMPLES = 10_000_000
SAMPLES_ENV = "RSQRTBENCH_SAMPLES"
INPUT_SCALE = 10000.0
PROGRESS_EVERY = 100_000

# Passes run in this order so every reference result exists before an error is computed
PASS_ORDER = (Provider.NATIVE, Provider.INLINE, Provider.EXTERNAL)

_NATIVE_WARNED = False
_ENVIRONMENT_CACHE: Dict[str, Any] | None = None


class ExternalProviderUnavailable(RuntimeError):
    pass


def _load_adapters() -> None:
    import importlib, importlib.util
    global _NATIVE_WARNED
    mod = "rsqrtbench_native"
    if importlib.util.find_spec(mod) is None:
        if not _NATIVE_WARNED:
            log.warning("rsqrtbench_native not installed; the External provider is unavailable.")
            _NATIVE_WARNED = True
        return
    module = importlib.import_module(mod)
    if not getattr(module, "_available", False) and not _NATIVE_WARNED:
        log.warning(
            "quake_rsqrt shared library not found. Build native/ (cmake --build) "
            "or set RSQRTBENCH_NATIVE_LIB to the compiled library path."
        )
        _NATIVE_WARNED = True


def resolve_functions(
    functions: Optional[Mapping[Provider, SqrtFunction]] = None,
) -> Dict[Provider, SqrtFunction]:
    """Pick the callable for every provider, explicit mapping first, registry second."""
    if functions is None:
        _load_adapters()
    chosen: Dict[Provider, SqrtFunction] = {}
    for provider in PASS_ORDER:
        if functions is not None and provider in functions:
            chosen[provider] = functions[provider]
        elif provider in registry:
            chosen[provider] = registry.get(provider)
    if Provider.EXTERNAL not in chosen:
        raise ExternalProviderUnavailable(
            "External Q_rsqrt is not available; build native/ or set RSQRTBENCH_NATIVE_LIB."
        )
    missing = [p.value for p in PASS_ORDER if p not in chosen]
    if missing:
        raise ExternalProviderUnavailable(f"Providers not registered: {', '.join(missing)}")
    return chosen


def generate_inputs(count: int, seed: Optional[int] = None) -> np.ndarray:
    """Uniform float32 inputs in [0, INPUT_SCALE)."""
    if count <= 0:
        raise ValueError("sample count must be positive")
    rng = np.random.default_rng(seed)
    values = (rng.random(count) * INPUT_SCALE).astype(np.float32)
    # float32 rounding can land exactly on the upper bound
    upper = np.nextafter(np.float32(INPUT_SCALE), np.float32(0))
    return np.minimum(values, upper)


@dataclass
class PassResult:
    provider: Provider
    results: np.ndarray
    times_ms: np.ndarray
    wall_ms: float


@dataclass
class RunSummary:
    samples: SampleSet
    pass_wall_ms: Dict[Provider, float]
    meta: Dict[str, Any] = field(default_factory=dict)

    def timing(self, provider: Provider) -> AggregateStat:
        return self.samples.timing_stat(provider)

    def error(self, provider: Provider) -> AggregateStat:
        return self.samples.error_stat(provider)


def run_pass(
    provider: Provider,
    fn: SqrtFunction,
    inputs: np.ndarray,
    *,
    progress_cb: Optional[Callable[[Provider, int, int], None]] = None,
) -> PassResult:
    """Call `fn` once per input, timing each call on its own."""
    count = int(inputs.size)
    results = np.empty(count, dtype=np.float32)
    times_ms = np.empty(count, dtype=np.float64)
    clock = time.perf_counter

    log.info("Running %s test", provider.value)
    pass_start = clock()
    for i, number in enumerate(inputs.tolist()):
        start = clock()
        value = fn(number)
        end = clock()
        results[i] = value
        times_ms[i] = (end - start) * 1000.0
        if progress_cb is not None and (i + 1) % PROGRESS_EVERY == 0:
            progress_cb(provider, i + 1, count)
    wall_ms = (clock() - pass_start) * 1000.0
    if progress_cb is not None and count % PROGRESS_EVERY:
        progress_cb(provider, count, count)
    log.info("Finished %s test in %.3f ms", provider.value, wall_ms)
    return PassResult(provider=provider, results=results, times_ms=times_ms, wall_ms=wall_ms)


def run_benchmark(
    count: int = DEFAULT_SAMPLES,
    *,
    seed: Optional[int] = None,
    functions: Optional[Mapping[Provider, SqrtFunction]] = None,
    progress_cb: Optional[Callable[[Provider, int, int], None]] = None,
) -> RunSummary:
    """Generate inputs and run the Native, Inline and External passes in order.

    The External provider is resolved before anything is generated or timed;
    if it is missing the run fails with `ExternalProviderUnavailable`.
    """
    chosen = resolve_functions(functions)

    log.info("Generating test data")
    samples = SampleSet(generate_inputs(count, seed))
    log.info("Generated %d test values", len(samples))

    wall: Dict[Provider, float] = {}
    for provider in PASS_ORDER:
        outcome = run_pass(provider, chosen[provider], samples.inputs, progress_cb=progress_cb)
        samples.record(provider, outcome.results, outcome.times_ms)
        wall[provider] = outcome.wall_ms

    meta = {
        "samples": len(samples),
        "seed": seed,
        "input_range": [0.0, INPUT_SCALE],
        "rss_mb": psutil.Process(os.getpid()).memory_info().rss / (1024 * 1024),
        "environment": _collect_environment_meta(),
    }
    return RunSummary(samples=samples, pass_wall_ms=wall, meta=meta)


# ---------------- Reporting ----------------

_STAT_FIELDS = (("Average", "average"), ("Max", "maximum"), ("Min", "minimum"))
_ERROR_FIELDS = (("Average", "average"), ("Min", "minimum"), ("Max", "maximum"))


def _format_value(value: float) -> str:
    if math.isnan(value):
        return "NaN (undefined)"
    if math.isinf(value):
        return ("Infinity" if value > 0 else "-Infinity") + " (undefined)"
    return f"{value:.6f}"


def format_line(provider: Provider, stat: str, value: float, *, is_error: bool = False) -> str:
    label = "error from native" if is_error else "time taken"
    unit = "%" if is_error else "ms"
    text = _format_value(value)
    if not (math.isnan(value) or math.isinf(value)):
        text += unit
    return f"[{provider.value}] [{stat}] {label} {text}"


def report_lines(summary: RunSummary) -> List[str]:
    """Timing lines (average, max, min per provider) then error lines per approximation."""
    lines: List[str] = []
    for stat, attr in _STAT_FIELDS:
        for provider in PASS_ORDER:
            lines.append(format_line(provider, stat, getattr(summary.timing(provider), attr)))
    for provider in PASS_ORDER:
        if not provider.is_approximation:
            continue
        agg = summary.error(provider)
        for stat, attr in _ERROR_FIELDS:
            lines.append(format_line(provider, stat, getattr(agg, attr), is_error=True))
    return lines


# ---------------- Cross-check ----------------

@dataclass
class CrossCheckResult:
    samples: int
    mismatches: int
    max_abs_diff: float
    first_mismatch: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.mismatches == 0


def cross_check(
    count: int,
    *,
    seed: Optional[int] = None,
    functions: Optional[Mapping[Provider, SqrtFunction]] = None,
) -> CrossCheckResult:
    """Compare Inline and External bit patterns over the same generated inputs."""
    chosen = resolve_functions(functions)
    inputs = generate_inputs(count, seed)
    inline = np.array([chosen[Provider.INLINE](x) for x in inputs.tolist()], dtype=np.float32)
    external = np.array([chosen[Provider.EXTERNAL](x) for x in inputs.tolist()], dtype=np.float32)
    differs = inline.view(np.uint32) != external.view(np.uint32)
    mismatches = int(np.count_nonzero(differs))
    first = float(inputs[np.argmax(differs)]) if mismatches else None
    with np.errstate(invalid="ignore"):
        diff = np.abs(inline.astype(np.float64) - external.astype(np.float64))
    return CrossCheckResult(
        samples=count,
        mismatches=mismatches,
        max_abs_diff=float(np.max(diff)) if diff.size else 0.0,
        first_mismatch=first,
    )


# ---------------- Export ----------------

def _detect_cpu_model() -> str | None:
    system = platform.system()
    if system == "Linux":
        cpuinfo = pathlib.Path("/proc/cpuinfo")
        if cpuinfo.exists():
            for line in cpuinfo.read_text(encoding="utf-8", errors="ignore").splitlines():
                if line.lower().startswith("model name"):
                    return line.split(":", 1)[1].strip()
    return platform.processor() or platform.machine() or None


def _collect_environment_meta() -> Dict[str, Any]:
    global _ENVIRONMENT_CACHE
    if _ENVIRONMENT_CACHE is None:
        info: Dict[str, Any] = {}
        cpu_model = _detect_cpu_model()
        if cpu_model:
            info["cpu_model"] = cpu_model
        info["cpu_count"] = psutil.cpu_count(logical=True)
        info["os"] = platform.platform(aliased=True)
        info["python"] = platform.python_version()
        info["numpy"] = np.__version__
        native = sys.modules.get("rsqrtbench_native")
        if native is not None and getattr(native, "library_path", None):
            info["native_library"] = native.library_path
        _ENVIRONMENT_CACHE = info
    return copy.deepcopy(_ENVIRONMENT_CACHE)


def _stat_dict(agg: AggregateStat) -> Dict[str, Optional[float]]:
    # JSON has no NaN/Infinity; export them as null
    return {k: (v if math.isfinite(v) else None) for k, v in vars(agg).items()}


def build_export_payload(summary: RunSummary) -> Dict[str, Any]:
    providers: Dict[str, Any] = {}
    for provider in PASS_ORDER:
        entry: Dict[str, Any] = {
            "pass_wall_ms": summary.pass_wall_ms[provider],
            "time_ms": _stat_dict(summary.timing(provider)),
        }
        if provider.is_approximation:
            entry["error_percent"] = _stat_dict(summary.error(provider))
        providers[provider.value] = entry
    return {"providers": providers, "meta": summary.meta}


def _repo_root() -> pathlib.Path:
    """Best-effort detection of the repository root (directory containing .git).
    Falls back to the current working directory if not found.
    """
    for p in (_HERE, *_HERE.parents):
        if (p / ".git").exists():
            return p
    return pathlib.Path.cwd()


def export_json(summary: RunSummary, export_path: str | None) -> pathlib.Path | None:
    if not export_path:
        return None
    # Normalize Windows-style separators on POSIX if users pass e.g. "results\file.json"
    if "\\" in export_path and ":" not in export_path:
        export_path = export_path.replace("\\", "/")
    path = pathlib.Path(export_path)
    if not path.is_absolute():
        path = _repo_root() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(build_export_payload(summary), f, indent=2)
    log.info("Wrote %s", path)
    return path
