"""Store plugins.

Brief: Defines the BasePlugin contract, the PluginRegistry and the bundled
plugins (TTL expiration, timestamps, dump).

Inputs:
  - None

Outputs:
  - None
"""

from __future__ import annotations

from .base import BasePlugin, plugin_aliases
from .dump import DumpPlugin
from .registry import PluginRegistry, default_registry, get_plugin_class
from .timestamps import TimestampsPlugin
from .ttl import TtlPlugin

__all__ = [
    "BasePlugin",
    "DumpPlugin",
    "PluginRegistry",
    "TimestampsPlugin",
    "TtlPlugin",
    "default_registry",
    "get_plugin_class",
    "plugin_aliases",
]
