
from __future__ import annotations
from enum import Enum
from typing import Protocol

"""Provider contracts used by the harness and adapters.

There are exactly three square root providers. Adapters register a callable
for their provider into the global registry; the harness only ever sees the
callable, never ctypes or numpy internals.
"""


class Provider(str, Enum):
    NATIVE = "Native"
    INLINE = "Inline"
    EXTERNAL = "External"

    @property
    def is_approximation(self) -> bool:
        return self is not Provider.NATIVE


class SqrtFunction(Protocol):
    """float -> float square root (or x * 1/sqrt(x)) contract."""
    def __call__(self, number: float) -> float: ...
