from __future__ import annotations

import functools
import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .backends.base import StorageBackend
from .backends.registry import load_backend
from .base import ABSENT
from .config.logging_config import get_store_logger
from .metadata import MetadataStore, initial_meta
from .plugins.base import BasePlugin
from .plugins.registry import PluginRegistry, default_registry

logger = logging.getLogger(__name__)

DEFAULT_NAME = "_simple_store"
META_PREFIX = "_meta_"

PluginsArg = Union[PluginRegistry, Iterable[Any], None]


class SimpleStore:
    """Local key-value store with a pluggable get/set pipeline.

    Brief:
      All reads and writes run synchronously against an in-memory snapshot.
      The snapshot is loaded once from the storage backend at construction
      and written back asynchronously (fire-and-forget) after each mutation.
      Installed plugins observe every set() (fan-out) and transform every
      get() (chain); per-key metadata such as TTLs lives under a reserved
      meta key that is never exposed as user data.

    Inputs:
      - name: Storage namespace. Also derives the meta key ("_meta_" + name)
        and the logger prefix.
      - logger_level: Verbosity for this store's logger (default "warn").
      - backend: StorageBackend instance or backend spec understood by
        plugstore.backends.load_backend (None uses the in-memory backend).
      - plugins: PluginRegistry, iterable of plugins (instances, classes or
        aliases), or None for the default registry (TTL plugin only).

    Outputs:
      - SimpleStore instance.

    Example use:
        >>> from plugstore import SimpleStore
        >>> store = SimpleStore("c1")
        >>> store.set("a", {"x": 1}, {"ttl": 50})
        >>> store.get("a")
        {'x': 1}
        >>> store.keys()
        ['a']
    """

    def __init__(
        self,
        name: str = DEFAULT_NAME,
        *,
        logger_level: object = "warn",
        backend: Optional[object] = None,
        plugins: PluginsArg = None,
    ) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("store name must be a non-empty string")

        self.name = name
        self.meta_key = META_PREFIX + name
        self.logger = get_store_logger(name, logger_level)
        self.backend: StorageBackend = load_backend(backend)
        self.registry = self._coerce_registry(plugins)

        self._lock = threading.RLock()
        self._depth = 0
        self._storage: Dict[str, Any] = self._empty_snapshot()
        self.init_success = False
        self._load()

    @classmethod
    def from_config(cls, cfg: Any) -> "SimpleStore":
        """Build a store from a StoreConfig or a plain config mapping."""

        from .config.config_parser import build_store

        return build_store(cfg)

    @staticmethod
    def _coerce_registry(plugins: PluginsArg) -> PluginRegistry:
        if plugins is None:
            return default_registry()
        if isinstance(plugins, PluginRegistry):
            return plugins
        if isinstance(plugins, (str, bytes, BasePlugin)):
            raise TypeError("plugins must be a PluginRegistry or an iterable of plugins")
        return PluginRegistry(plugins)

    def _empty_snapshot(self) -> Dict[str, Any]:
        return {self.meta_key: initial_meta()}

    def _load(self) -> None:
        """Adopt the backend snapshot, falling back to an empty one on failure."""

        try:
            snapshot = self.backend.load_sync(self.name)
        except Exception as exc:
            self.logger.error("failed loading snapshot from storage: %s", exc)
            return

        if snapshot is None:
            self.init_success = True
            return
        if not isinstance(snapshot, dict):
            self.logger.error(
                "ignoring stored snapshot of unexpected type %s", type(snapshot).__name__
            )
            return

        if not isinstance(snapshot.get(self.meta_key), dict):
            snapshot[self.meta_key] = initial_meta()
        self._storage = snapshot
        self.init_success = True

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r} keys={len(self.keys())}>"

    # -- internals -----------------------------------------------------

    def _check_key(self, key: object) -> None:
        if not isinstance(key, str) or not key:
            raise ValueError(f"key must be a non-empty string, got {key!r}")
        if key == self.meta_key:
            raise ValueError(f"key {key!r} is reserved for store metadata")

    def _write_back(self, event: str, *details: Any) -> None:
        def _ok() -> None:
            self.logger.debug("%s write-back succeeded %r", event, details)

        def _fail(exc: BaseException) -> None:
            self.logger.warning("%s write-back failed %r: %s", event, details, exc)

        try:
            self.backend.save_async(
                self.name, self._storage, on_success=_ok, on_failure=_fail
            )
        except Exception as exc:
            _fail(exc)

    def _commit(self, event: str, *details: Any) -> None:
        # Nested mutations (plugin hooks running inside set()) are persisted by
        # the outer operation's single write-back.
        if self._depth:
            return
        self._write_back(event, *details)

    def _resolve(self, key: str) -> Any:
        with self._lock:
            value = self.raw_get(key)
            for plugin in self.registry:
                try:
                    value = plugin.on_get(self, key, value)
                except Exception:
                    self.logger.warning(
                        "plugin %s on_get failed for key=%r value=%r",
                        plugin.name,
                        key,
                        value,
                        exc_info=True,
                    )
            return value

    # -- data operations -----------------------------------------------

    @property
    def meta(self) -> MetadataStore:
        """MetadataStore view over the current snapshot's meta mapping."""

        return MetadataStore(self._storage[self.meta_key], self.logger)

    @property
    def plugins(self) -> List[BasePlugin]:
        return self.registry.plugins

    def plugin(self, name: str) -> Optional[BasePlugin]:
        """Return the first installed plugin named name, or None."""

        return self.registry.get(name)

    def raw_get(self, key: str) -> Any:
        """Return the stored value for key without running plugins (ABSENT if none)."""

        if key == self.meta_key:
            return ABSENT
        with self._lock:
            return self._storage.get(key, ABSENT)

    def set(self, key: str, value: Any, options: Optional[Mapping[str, Any]] = None) -> None:
        """Brief: Store value under key and notify every plugin.

        Inputs:
          - key: Non-empty string other than the reserved meta key.
          - value: Any serializable value (not ABSENT).
          - options: Optional mapping of plugin-defined options, e.g.
            {"ttl": 1000}.

        Outputs:
          - None.

        Raises:
          - ValueError for invalid keys or an ABSENT value.
        """

        self._check_key(key)
        if value is ABSENT:
            raise ValueError("ABSENT cannot be stored; use delete() instead")
        opts = MappingProxyType(dict(options or {}))

        with self._lock:
            old_value = self._storage.get(key, ABSENT)
            self._storage[key] = value

            self._depth += 1
            try:
                for plugin in self.registry:
                    try:
                        plugin.on_set(self, key, value, opts, old_value)
                    except Exception:
                        self.logger.warning(
                            "plugin %s on_set failed for key=%r value=%r options=%r old=%r",
                            plugin.name,
                            key,
                            value,
                            dict(opts),
                            old_value,
                            exc_info=True,
                        )
            finally:
                self._depth -= 1

            self._commit("set", key, value, old_value)

    def get(self, key: str, default: Any = None) -> Any:
        """Brief: Return the value for key after the plugin on_get chain.

        Inputs:
          - key: Data key.
          - default: Returned when the key is missing or a plugin (e.g. TTL
            expiry) reports it as absent.

        Outputs:
          - Stored (possibly transformed) value, or default.
        """

        value = self._resolve(key)
        return default if value is ABSENT else value

    def has(self, key: str) -> bool:
        """True when get(key) would find a value; runs the full plugin chain."""

        return self._resolve(key) is not ABSENT

    def delete(self, key: str) -> bool:
        """Brief: Remove key together with all of its metadata.

        Inputs:
          - key: Data key.

        Outputs:
          - bool: True when the key existed, False otherwise (logged as a
            warning, never raised).
        """

        self._check_key(key)
        with self._lock:
            cleared = self.meta.clear_key(key)
            if key not in self._storage:
                self.logger.warning("delete failed, no such key %r", key)
                if cleared:
                    self._commit("delete", key)
                return False

            del self._storage[key]
            self._commit("delete", key)
            return True

    def clear(self) -> None:
        """Reset data and metadata to an empty snapshot."""

        with self._lock:
            self._storage = self._empty_snapshot()
            self._commit("clear")

    def keys(self) -> List[str]:
        """Brief: Return all data keys, excluding the meta key.

        Inputs:
          - None.

        Outputs:
          - list[str] in insertion order. Expired entries that have not been
            read since expiring are still listed (expiry is lazy).
        """

        with self._lock:
            return [k for k in self._storage.keys() if k != self.meta_key]

    # -- metadata ------------------------------------------------------

    def get_meta(self, kind: str, key: str, default: Any = ABSENT) -> Any:
        with self._lock:
            return self.meta.get(kind, key, default)

    def set_meta(self, kind: str, key: str, value: Any = ABSENT) -> bool:
        """Brief: Set metadata for key under kind, or clear it.

        Inputs:
          - kind: Metadata kind name.
          - key: Data key.
          - value: Value to store. ABSENT (the default) clears the entry.

        Outputs:
          - bool: False when a clear found no entry, or when a value is set
            for a key that holds no data (both logged as warnings).
        """

        with self._lock:
            if value is not ABSENT and key not in self._storage:
                self.logger.warning("set meta failed, no data for %s key %r", kind, key)
                return False
            result = self.meta.set(kind, key, value)
            if result:
                self._commit("set_meta", kind, key, value)
            return result

    def clear_meta(self, kind: str, key: str) -> bool:
        return self.set_meta(kind, key, ABSENT)

    def has_meta(self, kind: str) -> bool:
        with self._lock:
            return self.meta.has_kind(kind)

    # -- plugin capabilities ---------------------------------------------

    def _capability_table(self) -> Dict[str, Callable[..., Any]]:
        registry = self.__dict__.get("registry")
        table: Dict[str, Callable[..., Any]] = {}
        if registry is None:
            return table

        for plugin in registry:
            try:
                caps = plugin.capabilities() or {}
            except Exception:
                self.logger.warning(
                    "plugin %s capabilities() failed", plugin.name, exc_info=True
                )
                continue
            for cap_name, func in caps.items():
                if cap_name in table:
                    continue
                if (
                    cap_name.startswith("_")
                    or cap_name in self.__dict__
                    or hasattr(type(self), cap_name)
                ):
                    self.logger.debug(
                        "plugin %s capability %r shadows a store attribute; ignored",
                        plugin.name,
                        cap_name,
                    )
                    continue
                table[cap_name] = func
        return table

    def capabilities(self) -> List[str]:
        """Return the names of plugin-contributed operations."""

        return sorted(self._capability_table().keys())

    def capability(self, name: str) -> Callable[..., Any]:
        """Brief: Return a plugin-contributed operation bound to this store.

        Inputs:
          - name: Operation name, e.g. "set_ttl".

        Outputs:
          - Callable with the store already bound as first argument.

        Raises:
          - AttributeError when no installed plugin offers name.
        """

        func = self._capability_table().get(name)
        if func is None:
            raise AttributeError(
                f"{type(self).__name__!r} has no capability {name!r}; "
                "is the providing plugin installed?"
            )
        return functools.partial(func, self)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return self.capability(name)

    # -- lifecycle -----------------------------------------------------

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Wait for pending write-backs; True when all completed."""

        return self.backend.flush(timeout)

    def close(self) -> None:
        self.backend.close()
