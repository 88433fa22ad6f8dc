from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

import numpy as np

from .interfaces import Provider

"""Sample storage and aggregate statistics for one benchmark run.

A run holds millions of samples, so `SampleSet` keeps them column-wise in
numpy arrays. Each provider column is written by exactly one pass and then
frozen; `SampleSet[i]` hands out an immutable `Sample` view.
"""


@dataclass(frozen=True)
class Measurement:
    result: float
    time_ms: float
    error_percent: Optional[float] = None  # None for the reference provider


@dataclass(frozen=True)
class Sample:
    input: float
    measurements: Dict[Provider, Measurement]

    def __getitem__(self, provider: Provider) -> Measurement:
        return self.measurements[provider]


@dataclass(frozen=True)
class AggregateStat:
    average: float
    minimum: float
    maximum: float
    median: float
    stddev: float

    @classmethod
    def of(cls, values: np.ndarray) -> "AggregateStat":
        # NaN/Infinity propagate on purpose
        data = np.asarray(values, dtype=np.float64)
        if data.size == 0:
            raise ValueError("cannot aggregate an empty column")
        with np.errstate(invalid="ignore", over="ignore"):
            lo = float(np.min(data))
            hi = float(np.max(data))
            if math.isfinite(lo) and math.isfinite(hi):
                # exact sum of non-negative offsets from the minimum
                average = lo + math.fsum((data - lo).tolist()) / data.size
            else:
                average = float(np.mean(data))
            return cls(
                average=average,
                minimum=lo,
                maximum=hi,
                median=float(np.median(data)),
                stddev=float(np.std(data)),
            )


class SampleSet:
    """Ordered, append-only sample columns for the three providers."""

    def __init__(self, inputs: np.ndarray) -> None:
        self.inputs = np.array(inputs, dtype=np.float32)
        self.inputs.flags.writeable = False
        self.results: Dict[Provider, np.ndarray] = {}
        self.times_ms: Dict[Provider, np.ndarray] = {}
        self.errors: Dict[Provider, np.ndarray] = {}

    def __len__(self) -> int:
        return int(self.inputs.size)

    def has(self, provider: Provider) -> bool:
        return provider in self.results

    def record(self, provider: Provider, results: np.ndarray, times_ms: np.ndarray) -> None:
        """Store one finished pass. Errors need the Native pass already stored."""
        if provider in self.results:
            raise ValueError(f"{provider.value} pass already recorded")
        res = np.array(results, dtype=np.float32)
        times = np.array(times_ms, dtype=np.float64)
        if res.shape != self.inputs.shape or times.shape != self.inputs.shape:
            raise ValueError(f"{provider.value} pass has {res.size} results for {len(self)} inputs")
        if provider.is_approximation:
            if Provider.NATIVE not in self.results:
                raise ValueError(f"{provider.value} error needs the {Provider.NATIVE.value} pass first")
            err = error_percent(res, self.results[Provider.NATIVE])
            err.flags.writeable = False
            self.errors[provider] = err
        res.flags.writeable = False
        times.flags.writeable = False
        self.results[provider] = res
        self.times_ms[provider] = times

    def __getitem__(self, index: int) -> Sample:
        measurements = {
            provider: Measurement(
                result=float(self.results[provider][index]),
                time_ms=float(self.times_ms[provider][index]),
                error_percent=float(self.errors[provider][index]) if provider in self.errors else None,
            )
            for provider in Provider
            if provider in self.results
        }
        return Sample(input=float(self.inputs[index]), measurements=measurements)

    def __iter__(self) -> Iterator[Sample]:
        for i in range(len(self)):
            yield self[i]

    def timing_stat(self, provider: Provider) -> AggregateStat:
        return AggregateStat.of(self.times_ms[provider])

    def error_stat(self, provider: Provider) -> AggregateStat:
        return AggregateStat.of(self.errors[provider])


def error_percent(approx: np.ndarray, reference: np.ndarray) -> np.ndarray:
    """|approx - reference| / reference * 100 in float32.

    A zero reference yields NaN or Infinity without a warning.
    """
    a = np.asarray(approx, dtype=np.float32)
    r = np.asarray(reference, dtype=np.float32)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.abs((a - r) / r * np.float32(100))
