from __future__ import annotations

import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
for rel in ("apps/cli/src", "libs/core/src", "libs/adapters/native/src"):
    candidate = str(ROOT / rel)
    if candidate not in sys.path:
        sys.path.insert(0, candidate)

from rsqrtbench import Provider, q_rsqrt, registry  # noqa: E402
from rsqrtbench_cli.runners import common as runners_common  # noqa: E402


def stub_external(number: float) -> np.float32:
    """Stand-in for the ctypes Q_rsqrt: same bit trick, evaluated in-process."""
    x = np.float32(number)
    return x * q_rsqrt(x)


@pytest.fixture
def no_adapter_loading(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(runners_common, "_load_adapters", lambda: None)


@pytest.fixture
def stub_registry(no_adapter_loading):
    original_items = dict(registry._items)  # type: ignore[attr-defined]
    registry._items[Provider.EXTERNAL] = stub_external  # type: ignore[attr-defined]
    try:
        yield
    finally:
        registry._items.clear()  # type: ignore[attr-defined]
        registry._items.update(original_items)  # type: ignore[attr-defined]


@pytest.fixture
def registry_without_external(no_adapter_loading):
    original_items = dict(registry._items)  # type: ignore[attr-defined]
    registry._items.pop(Provider.EXTERNAL, None)  # type: ignore[attr-defined]
    try:
        yield
    finally:
        registry._items.clear()  # type: ignore[attr-defined]
        registry._items.update(original_items)  # type: ignore[attr-defined]
