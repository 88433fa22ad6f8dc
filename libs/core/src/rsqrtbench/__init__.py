
from .interfaces import Provider, SqrtFunction
from .registry import registry
from .approx import MAGIC, fast_sqrt, native_sqrt, newton_step, q_rsqrt, rsqrt_estimate
from .metrics import AggregateStat, Measurement, Sample, SampleSet, error_percent
from . import providers as _providers  # noqa: F401

__all__ = [
    "Provider",
    "SqrtFunction",
    "registry",
    "MAGIC",
    "fast_sqrt",
    "native_sqrt",
    "newton_step",
    "q_rsqrt",
    "rsqrt_estimate",
    "AggregateStat",
    "Measurement",
    "Sample",
    "SampleSet",
    "error_percent",
]
