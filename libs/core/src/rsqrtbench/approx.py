from __future__ import annotations
"""Single-precision square root providers.

`q_rsqrt` is the classic Quake III "fast inverse square root": reinterpret the
float32 bits as an int32, subtract half of it from a magic constant, read the
bits back as a float and polish the estimate with one Newton-Raphson step.
`fast_sqrt` multiplies the input back in so the result is comparable with
`native_sqrt`.

Every intermediate value is a numpy float32 so the rounding matches the C
implementation in native/ bit for bit (when built without FMA contraction).
Inputs outside (0, inf) are not checked; they yield unspecified floats.
"""

import math

import numpy as np

MAGIC = 0x5F3759DF

_HALF = np.float32(0.5)
_THREE_HALVES = np.float32(1.5)


def _float_bits(x: np.float32) -> int:
    return int(x.view(np.int32))


def _bits_float(i: int) -> np.float32:
    return np.uint32(i & 0xFFFFFFFF).view(np.float32)


def rsqrt_estimate(number: float) -> np.float32:
    """Zeroth-order 1/sqrt(x) from the exponent bit trick (no refinement)."""
    i = _float_bits(np.float32(number))
    i = MAGIC - (i >> 1)
    return _bits_float(i)


def newton_step(number: float, y: np.float32) -> np.float32:
    """One Newton-Raphson iteration for f(y) = 1/y**2 - x."""
    x2 = np.float32(number) * _HALF
    return y * (_THREE_HALVES - (x2 * y * y))


def q_rsqrt(number: float) -> np.float32:
    return newton_step(number, rsqrt_estimate(number))


def fast_sqrt(number: float) -> np.float32:
    """sqrt(x) as x * q_rsqrt(x)."""
    x = np.float32(number)
    return x * q_rsqrt(x)


def native_sqrt(number: float) -> np.float32:
    return np.float32(math.sqrt(number))
