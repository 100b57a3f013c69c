"""Storage backends.

Brief: Defines the StorageBackend interface (synchronous load, asynchronous
fire-and-forget save) and the bundled implementations.

Inputs:
  - None

Outputs:
  - None
"""

from __future__ import annotations

from .base import StorageBackend, StorageError, backend_aliases
from .json_file import JsonFileBackend
from .memory import MemoryBackend
from .registry import load_backend
from .sqlite_backend import SQLiteBackend

__all__ = [
    "JsonFileBackend",
    "MemoryBackend",
    "SQLiteBackend",
    "StorageBackend",
    "StorageError",
    "backend_aliases",
    "load_backend",
]
