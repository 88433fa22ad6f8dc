from __future__ import annotations

import ctypes
from pathlib import Path
from typing import Optional

from ._locate import RSQRTNativeError, find_library

ENTRY_POINT = "Q_rsqrt"


def load_library(path: Optional[Path] = None) -> ctypes.CDLL:
    path = path or find_library()
    try:
        lib = ctypes.CDLL(str(path))
    except OSError as exc:
        raise RSQRTNativeError(f"Failed to load {path}: {exc}") from exc
    try:
        fn = getattr(lib, ENTRY_POINT)
    except AttributeError as exc:
        raise RSQRTNativeError(f"{path} does not export {ENTRY_POINT}") from exc
    fn.argtypes = [ctypes.c_float]
    fn.restype = ctypes.c_float
    return lib


_lib = load_library()
LIBRARY_PATH = str(_lib._name)


def q_rsqrt(number: float) -> float:
    return _lib.Q_rsqrt(float(number))
