from __future__ import annotations

from .approx import fast_sqrt, native_sqrt
from .interfaces import Provider
from .registry import registry

"""In-process providers. The external one lives in rsqrtbench_native."""

registry.register(Provider.NATIVE)(native_sqrt)
registry.register(Provider.INLINE)(fast_sqrt)
