from __future__ import annotations

import difflib
import importlib
import inspect
import logging
import pkgutil
import re
import threading
from typing import Any, Dict, Iterable, Iterator, List, Optional, Type, Union

from cachetools import LRUCache, cached

from .base import BasePlugin

logger = logging.getLogger(__name__)

_CAMEL_1 = re.compile(r"(.)([A-Z][a-z]+)")
_CAMEL_2 = re.compile(r"([a-z0-9])([A-Z])")


@cached(cache=LRUCache(maxsize=1024))
def _camel_to_snake(name: str) -> str:
    s1 = _CAMEL_1.sub(r"\1_\2", name)
    s2 = _CAMEL_2.sub(r"\1_\2", s1)
    return s2.lower()


@cached(cache=LRUCache(maxsize=1024))
def _default_alias_for(cls: Type[BasePlugin]) -> str:
    name = cls.__name__
    if name.endswith("Plugin"):
        name = name[:-6]
    return _camel_to_snake(name)


@cached(cache=LRUCache(maxsize=1024))
def _normalize(alias: str) -> str:
    return alias.strip().lower().replace("-", "_")


def _iter_plugin_modules(package_name: str = "plugstore.plugins") -> Iterable[str]:
    pkg = importlib.import_module(package_name)
    for modinfo in pkgutil.walk_packages(pkg.__path__, pkg.__name__ + "."):
        yield modinfo.name


def discover_plugins(
    package_name: str = "plugstore.plugins",
) -> Dict[str, Type[BasePlugin]]:
    """
    Discover and register plugins by importing modules.

    Inputs:
      - package_name (str): Package path to scan for plugins

    Outputs:
      - Dict[str, Type[BasePlugin]]: Mapping from normalized aliases to plugin classes

    Raises ImportError if module import fails. Raises ValueError on duplicate aliases.

    Example:
        >>> registry = discover_plugins("plugstore.plugins")
        >>> "ttl" in registry
        True
    """
    registry: Dict[str, Type[BasePlugin]] = {}

    for modname in _iter_plugin_modules(package_name):
        try:
            module = importlib.import_module(modname)
        except ImportError:
            logger.error("Failed importing plugin module %s", modname)
            raise

        for _, obj in inspect.getmembers(module, inspect.isclass):
            if not issubclass(obj, BasePlugin) or obj is BasePlugin:
                continue

            claimed = set(_normalize(a) for a in (getattr(obj, "aliases", ()) or ()))
            claimed.add(_normalize(_default_alias_for(obj)))

            for alias in claimed:
                if alias in registry and registry[alias] is not obj:
                    other = registry[alias]
                    raise ValueError(
                        f"Duplicate plugin alias '{alias}' claimed by {obj.__module__}.{obj.__name__} "
                        f"and {other.__module__}.{other.__name__}"
                    )
                registry[alias] = obj

    return registry


def get_plugin_class(
    identifier: str, registry: Dict[str, Type[BasePlugin]] | None = None
) -> Type[BasePlugin]:
    """
    Resolve identifier to a plugin class.
    - If identifier contains a dot, treat as dotted import path "pkg.mod.Class".
    - Otherwise, treat as alias and resolve via registry.
    """
    ident = identifier.strip()
    if "." in ident:
        modname, _, classname = ident.rpartition(".")
        if not modname or not classname:
            raise ValueError(f"Invalid plugin path '{identifier}'")
        module = importlib.import_module(modname)
        cls = getattr(module, classname)
        if not (inspect.isclass(cls) and issubclass(cls, BasePlugin)):
            raise TypeError(f"{identifier} is not a BasePlugin subclass")
        return cls

    reg = registry or discover_plugins()
    key = _normalize(ident)
    try:
        return reg[key]
    except KeyError:
        suggestions = difflib.get_close_matches(key, list(reg.keys()), n=3)
        raise KeyError(
            f"Unknown plugin alias '{identifier}'. "
            f"Known aliases: {', '.join(sorted(reg.keys()))}. "
            f"Suggestions: {suggestions}"
        )


PluginRef = Union[str, Type[BasePlugin], BasePlugin]


class PluginRegistry:
    """Brief: Ordered, append-only list of installed plugin instances.

    Inputs (constructor):
      - plugins: Optional iterable of already-built BasePlugin instances.

    Outputs:
      - PluginRegistry instance.

    Notes:
      - Installation order is execution order for both the on_set fan-out and
        the on_get chain.
      - Installing the same plugin class twice yields two independent
        instances; deduplication is the caller's responsibility.
      - Each SimpleStore receives a registry at construction. Passing the same
        registry object to several stores makes them share one plugin list.

    Example:
      >>> reg = PluginRegistry()
      >>> ttl = reg.install("ttl")
      >>> [p.name for p in reg]
      ['ttl']
    """

    def __init__(self, plugins: Optional[Iterable[BasePlugin]] = None) -> None:
        self._plugins: List[BasePlugin] = []
        self._lock = threading.Lock()
        for plugin in plugins or ():
            self.install(plugin)

    def install(
        self, plugin: PluginRef, *, name: Optional[str] = None, **config: object
    ) -> BasePlugin:
        """Brief: Construct (when needed) and append one plugin instance.

        Inputs:
          - plugin: BasePlugin subclass, alias / dotted path string, or an
            already-constructed BasePlugin instance.
          - name: Optional instance name forwarded to the constructor.
          - **config: Plugin configuration forwarded to the constructor.

        Outputs:
          - BasePlugin: The installed instance.
        """

        if isinstance(plugin, BasePlugin):
            if name is not None or config:
                raise ValueError(
                    "name/config cannot be applied to an already-constructed plugin"
                )
            instance = plugin
        else:
            if isinstance(plugin, str):
                cls = get_plugin_class(plugin)
            elif inspect.isclass(plugin) and issubclass(plugin, BasePlugin):
                cls = plugin
            else:
                raise TypeError(
                    f"Cannot install {plugin!r}: expected a BasePlugin subclass, "
                    "instance, or alias"
                )
            instance = cls(name=name, **config)

        with self._lock:
            self._plugins.append(instance)
        logger.debug("installed plugin %s at position %d", instance, len(self) - 1)
        return instance

    @classmethod
    def from_specs(cls, specs: Optional[Iterable[Any]]) -> "PluginRegistry":
        """Brief: Build a registry from config plugin specs.

        Inputs:
          - specs: Iterable of entries shaped as either:
              - "alias" or "pkg.mod.Class"
              - {"module": <alias|path>, "name": <str>, "config": {...}}
            pydantic PluginSpec objects are accepted as well.

        Outputs:
          - PluginRegistry with the plugins installed in order.

        Example:
          plugins:
            - ttl
            - module: timestamps
              name: times
        """

        registry = cls()
        for spec in specs or ():
            if isinstance(spec, str):
                registry.install(spec)
                continue

            if isinstance(spec, dict):
                data = spec
            elif hasattr(spec, "model_dump"):
                data = spec.model_dump()
            elif hasattr(spec, "dict"):
                data = spec.dict()
            else:
                raise TypeError(f"Invalid plugin spec {spec!r}")

            module = data.get("module")
            if not isinstance(module, str) or not module.strip():
                raise ValueError(f"Plugin spec requires a 'module' field: {spec!r}")
            subcfg = data.get("config") or {}
            if not isinstance(subcfg, dict):
                raise ValueError(f"Plugin 'config' must be a mapping: {spec!r}")
            registry.install(module, name=data.get("name"), **dict(subcfg))
        return registry

    @property
    def plugins(self) -> List[BasePlugin]:
        with self._lock:
            return list(self._plugins)

    def get(self, name: str) -> Optional[BasePlugin]:
        """Return the first installed plugin whose name is name, else None."""

        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        return None

    def __iter__(self) -> Iterator[BasePlugin]:
        return iter(self.plugins)

    def __len__(self) -> int:
        with self._lock:
            return len(self._plugins)


def default_registry() -> PluginRegistry:
    """Brief: Registry used when a store is built without explicit plugins.

    Inputs:
      - None.

    Outputs:
      - PluginRegistry containing a single TtlPlugin.
    """

    from .ttl import TtlPlugin

    registry = PluginRegistry()
    registry.install(TtlPlugin)
    return registry
