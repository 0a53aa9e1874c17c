from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Tuple


@dataclass
class TTLCache:
    """In-memory key/value store whose entries expire lazily on read."""

    default_ttl_seconds: float
    clock: Callable[[], float] = time.monotonic
    _store: Dict[str, Tuple[Any, float]] = field(default_factory=dict, repr=False)

    def set(self, key: str, value: Any, ttl_seconds: Optional[float] = None) -> None:
        ttl = self.default_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._store[key] = (value, self.clock() + ttl)

    def get(self, key: str, default: Any = None) -> Any:
        entry = self._store.get(key)
        if entry is None:
            return default
        value, expires_at = entry
        if self.clock() > expires_at:
            del self._store[key]
            return default
        return value

    def __contains__(self, key: str) -> bool:
        marker = object()
        return self.get(key, marker) is not marker

    def delete(self, key: str) -> None:
        self._store.pop(key, None)

    def clear(self) -> None:
        self._store.clear()

    def __len__(self) -> int:
        return len(self._store)
