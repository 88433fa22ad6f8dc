
from __future__ import annotations
from typing import Dict, Callable

from .interfaces import Provider, SqrtFunction

class _Registry:
    def __init__(self) -> None:
        self._items: Dict[Provider, SqrtFunction] = {}

    def register(self, provider: Provider) -> Callable[[SqrtFunction], SqrtFunction]:
        def _inner(fn: SqrtFunction) -> SqrtFunction:
            self._items[provider] = fn
            return fn
        return _inner

    def get(self, provider: Provider) -> SqrtFunction:
        return self._items[provider]

    def __contains__(self, provider: Provider) -> bool:
        return provider in self._items

    def list(self) -> Dict[Provider, SqrtFunction]:
        # Stable enum order regardless of registration order
        return {p: self._items[p] for p in Provider if p in self._items}

registry = _Registry()
