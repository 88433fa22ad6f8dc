from __future__ import annotations

import numpy as np

from rsqrtbench import Provider, registry

from ._core import q_rsqrt


@registry.register(Provider.EXTERNAL)
def external_sqrt(number: float) -> np.float32:
    """x * Q_rsqrt(x) with Q_rsqrt evaluated in the native library."""
    x = np.float32(number)
    return x * np.float32(q_rsqrt(x))
