"""Configuration parsing helpers for plugstore.

Brief:
  Reads YAML config files, validates them with the StoreConfig pydantic model
  and builds ready-to-use SimpleStore instances (backend and plugin registry
  included).

Inputs:
  - YAML config paths or already-parsed mappings

Outputs:
  - StoreConfig models and constructed SimpleStore instances
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Any, Dict, Optional

import yaml

from .config_schema import StoreConfig
from .logging_config import init_logging

if TYPE_CHECKING:  # pragma: no cover - typing only
    from plugstore.plugins.registry import PluginRegistry
    from plugstore.store import SimpleStore

logger = logging.getLogger(__name__)


def load_config(data: Any) -> StoreConfig:
    """Brief: Validate a parsed config mapping.

    Inputs:
      - data: StoreConfig, a mapping with the store fields, or a mapping with
        a top-level "store" key holding them. None yields the defaults.

    Outputs:
      - StoreConfig.

    Raises:
      - pydantic.ValidationError on invalid fields; TypeError when data is not
        a mapping.
    """

    if isinstance(data, StoreConfig):
        return data
    if data is None:
        return StoreConfig()
    if not isinstance(data, dict):
        raise TypeError("store config must be a mapping")
    if "store" in data and isinstance(data.get("store"), (dict, type(None))):
        section: Dict[str, Any] = dict(data.get("store") or {})
        if "logging" in data and "logging" not in section:
            section["logging"] = data["logging"]
        data = section
    return StoreConfig(**data)


def parse_config_file(config_path: str) -> StoreConfig:
    """Brief: Read and validate a YAML config file.

    Inputs:
      - config_path: Path to a YAML file.

    Outputs:
      - StoreConfig.

    Example:
      >>> cfg = parse_config_file("./config/plugstore.yaml")  # doctest: +SKIP
      >>> cfg.name
      'c1'
    """

    path = os.path.abspath(os.path.expanduser(config_path))
    with open(path, "r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh)
    logger.debug("loaded config from %s", path)
    return load_config(raw)


def build_registry(cfg: StoreConfig) -> Optional["PluginRegistry"]:
    """Return a PluginRegistry for cfg.plugins (None keeps the store default)."""

    from plugstore.plugins.registry import PluginRegistry

    if cfg.plugins is None:
        return None
    return PluginRegistry.from_specs(cfg.plugins)


def build_store(cfg: Any, *, setup_logging: bool = False) -> "SimpleStore":
    """Brief: Build a SimpleStore from configuration.

    Inputs:
      - cfg: StoreConfig or mapping accepted by load_config().
      - setup_logging: When True and cfg.logging is set, call init_logging()
        before constructing the store.

    Outputs:
      - SimpleStore instance.
    """

    from plugstore.store import SimpleStore

    config = load_config(cfg)
    if setup_logging and config.logging is not None:
        init_logging(config.logging)

    return SimpleStore(
        config.name,
        logger_level=config.logger_level,
        backend=config.backend,
        plugins=build_registry(config),
    )


def store_from_file(config_path: str) -> "SimpleStore":
    """Parse config_path and build the store it describes, logging included."""

    return build_store(parse_config_file(config_path), setup_logging=True)
