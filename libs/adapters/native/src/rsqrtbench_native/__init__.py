from __future__ import annotations

import warnings

from ._locate import ENV_LIB, RSQRTNativeError, find_library

_available = False
library_path = None

try:
    from . import _core
except RSQRTNativeError as exc:
    warnings.warn(f"rsqrtbench_native disabled: {exc}")
else:
    from . import external as _external  # noqa: F401
    library_path = _core.LIBRARY_PATH
    _available = True

__all__ = ["_available", "library_path", "ENV_LIB", "RSQRTNativeError", "find_library"]
