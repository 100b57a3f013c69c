"""Configuration helpers: pydantic models, YAML parsing and logging setup."""

from __future__ import annotations

from .config_parser import build_store, load_config, parse_config_file, store_from_file
from .config_schema import BackendSpec, PluginSpec, StoreConfig
from .logging_config import get_store_logger, init_logging

__all__ = [
    "BackendSpec",
    "PluginSpec",
    "StoreConfig",
    "build_store",
    "get_store_logger",
    "init_logging",
    "load_config",
    "parse_config_file",
    "store_from_file",
]
