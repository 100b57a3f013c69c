from __future__ import annotations

import copy
import threading
from typing import Any, Dict

from .base import StorageBackend, backend_aliases


@backend_aliases("memory", "in_memory")
class MemoryBackend(StorageBackend):
    """Process-local backend keeping snapshots in a dict.

    Brief:
      Default backend when no durable storage is configured. Stores built on
      the same MemoryBackend instance with the same name see each other's
      last written snapshot, which makes it handy in tests.

    Inputs:
      - **config: Ignored; accepted for registry symmetry.

    Outputs:
      - MemoryBackend instance.

    Example:
      >>> backend = MemoryBackend()
      >>> backend.save_sync("c1", {"a": 1})
      >>> backend.load_sync("c1")
      {'a': 1}
    """

    def __init__(self, **config: object) -> None:
        super().__init__()
        self._data: Dict[str, Any] = {}
        self._data_lock = threading.RLock()

    def load_sync(self, namespace: str) -> Any | None:
        with self._data_lock:
            if namespace not in self._data:
                return None
            return copy.deepcopy(self._data[namespace])

    def save_sync(self, namespace: str, snapshot: Any) -> None:
        with self._data_lock:
            self._data[namespace] = copy.deepcopy(snapshot)
