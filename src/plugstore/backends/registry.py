from __future__ import annotations

import difflib
import importlib
import inspect
import pkgutil
from typing import Dict, Iterable, Optional, Type

from cachetools import LRUCache, cached

from .base import StorageBackend
from plugstore.plugins.registry import _camel_to_snake, _normalize


def _default_alias_for(cls: Type[StorageBackend]) -> str:
    name = cls.__name__
    if name.endswith("Backend"):
        name = name[: -len("Backend")]
    return _camel_to_snake(name)


def _iter_backend_modules(
    package_name: str = "plugstore.backends",
) -> Iterable[str]:
    pkg = importlib.import_module(package_name)
    for modinfo in pkgutil.walk_packages(pkg.__path__, pkg.__name__ + "."):
        yield modinfo.name


@cached(cache=LRUCache(maxsize=4))
def discover_backends(
    package_name: str = "plugstore.backends",
) -> Dict[str, Type[StorageBackend]]:
    """Brief: Discover StorageBackend subclasses and register them by alias.

    Inputs:
      - package_name: Package path to scan.

    Outputs:
      - Dict[str, Type[StorageBackend]] mapping normalized aliases to classes.
    """

    registry: Dict[str, Type[StorageBackend]] = {}

    for modname in _iter_backend_modules(package_name):
        module = importlib.import_module(modname)

        for _, obj in inspect.getmembers(module, inspect.isclass):
            if not issubclass(obj, StorageBackend) or obj is StorageBackend:
                continue

            claimed = set(_normalize(a) for a in (getattr(obj, "aliases", ()) or ()))
            claimed.add(_normalize(_default_alias_for(obj)))

            for alias in claimed:
                if alias in registry and registry[alias] is not obj:
                    other = registry[alias]
                    raise ValueError(
                        f"Duplicate backend alias '{alias}' claimed by {obj.__module__}.{obj.__name__} "
                        f"and {other.__module__}.{other.__name__}"
                    )
                registry[alias] = obj

    return registry


def get_backend_class(identifier: str) -> Type[StorageBackend]:
    """Brief: Resolve identifier to a storage backend class.

    Inputs:
      - identifier: Dotted import path or alias.

    Outputs:
      - StorageBackend subclass.
    """

    ident = str(identifier).strip()
    if "." in ident:
        modname, _, classname = ident.rpartition(".")
        if not modname or not classname:
            raise ValueError(f"Invalid storage backend path '{identifier}'")
        module = importlib.import_module(modname)
        cls = getattr(module, classname)
        if not (inspect.isclass(cls) and issubclass(cls, StorageBackend)):
            raise TypeError(f"{identifier} is not a StorageBackend subclass")
        return cls

    reg = discover_backends()
    key = _normalize(ident)
    try:
        return reg[key]
    except KeyError:
        suggestions = difflib.get_close_matches(key, list(reg.keys()), n=3)
        raise KeyError(
            f"Unknown storage backend alias '{identifier}'. "
            f"Known aliases: {', '.join(sorted(reg.keys()))}. "
            f"Suggestions: {suggestions}"
        )


def load_backend(cfg: Optional[object]) -> StorageBackend:
    """Brief: Build the configured storage backend.

    Inputs:
      - cfg: Backend config. Supported forms:
        - None: Use the in-memory backend.
        - StorageBackend instance: returned unchanged.
        - str: Alias or dotted import path.
        - dict: {"module": <str>, "config": <dict>}.

    Outputs:
      - StorageBackend instance.

    Example:
      backend:
        module: sqlite
        config:
          db_path: ./var/plugstore.db
    """

    if cfg is None:
        return get_backend_class("memory")()

    if isinstance(cfg, StorageBackend):
        return cfg

    if isinstance(cfg, str):
        return get_backend_class(cfg)()

    if hasattr(cfg, "model_dump"):
        cfg = cfg.model_dump()

    if isinstance(cfg, dict):
        module = cfg.get("module")
        if isinstance(module, str):
            module = module.strip() or None
        if module is None:
            module = "memory"

        subcfg = cfg.get("config")
        if not isinstance(subcfg, dict):
            subcfg = {}

        cls = get_backend_class(str(module))
        return cls(**dict(subcfg))

    raise TypeError("backend config must be a mapping, string, or null")
