from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Iterator, Optional

"""Locate the compiled quake_rsqrt library without loading it."""

ENV_LIB = "RSQRTBENCH_NATIVE_LIB"


class RSQRTNativeError(RuntimeError):
    pass


def library_names(platform: str = sys.platform) -> list[str]:
    if platform == "win32":
        return ["quake_rsqrt.dll", "libquake_rsqrt.dll"]
    if platform == "darwin":
        return ["libquake_rsqrt.dylib", "libquake_rsqrt.so"]
    return ["libquake_rsqrt.so"]


def default_candidates(start: Optional[Path] = None) -> Iterator[Path]:
    env = os.getenv(ENV_LIB)
    if env:
        yield Path(env)
    here = (start or Path(__file__)).resolve()
    visited: set[Path] = set()
    names = library_names()
    # Multi-config generators put the binary under a per-config directory
    subdirs = [Path("RelWithDebInfo"), Path("Release"), Path("Debug"), Path(".")]

    for parent in here.parents:
        native_home = parent if parent.name == "native" else parent / "native"
        if native_home in visited or not native_home.exists():
            continue
        visited.add(native_home)
        build_dir = native_home / "build"
        if not build_dir.exists():
            continue
        for sub in subdirs:
            for name in names:
                yield build_dir / sub / name


def find_library(start: Optional[Path] = None) -> Path:
    for path in default_candidates(start):
        if path.is_file():
            return path
    raise RSQRTNativeError(
        "Unable to locate the quake_rsqrt shared library. "
        f"Build it via CMake (see native/README.md) or point {ENV_LIB} to the compiled binary."
    )
