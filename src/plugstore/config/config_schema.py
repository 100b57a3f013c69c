"""Pydantic models for plugstore configuration.

Brief:
  Validates the mapping used to build a SimpleStore, whether it comes from a
  YAML file (see config_parser.parse_config_file) or from Python code.

Example YAML:

    store:
      name: c1
      logger_level: warn
      backend:
        module: sqlite
        config:
          db_path: ./var/plugstore.db
      plugins:
        - ttl
        - module: timestamps
          name: times
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, validator

from .logging_config import parse_level


class PluginSpec(BaseModel):
    """Brief: One entry of the plugins list.

    Inputs:
      - module: Plugin alias or dotted class path.
      - name: Optional instance name.
      - config: Plugin-specific options passed to the constructor.

    Outputs:
      - PluginSpec instance.
    """

    module: str = Field(min_length=1)
    name: Optional[str] = None
    config: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "forbid"

    @validator("config", pre=True)
    def _none_config_is_empty(cls, v):
        return {} if v is None else v


class BackendSpec(BaseModel):
    """Brief: Storage backend selection.

    Inputs:
      - module: Backend alias or dotted class path (default "memory").
      - config: Backend-specific options.

    Outputs:
      - BackendSpec instance.
    """

    module: str = Field(default="memory", min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)

    class Config:
        extra = "forbid"

    @validator("config", pre=True)
    def _none_config_is_empty(cls, v):
        return {} if v is None else v


class StoreConfig(BaseModel):
    """Brief: Top-level configuration for one SimpleStore.

    Inputs:
      - name: Storage namespace (non-empty).
      - logger_level: debug, info, warn, error or crit.
      - backend: Backend alias, BackendSpec mapping, or None for memory.
      - plugins: List of plugin aliases/specs; None installs the default TTL
        plugin, an empty list installs nothing.
      - logging: Optional mapping passed to init_logging().

    Outputs:
      - StoreConfig instance.
    """

    name: str = Field(default="_simple_store", min_length=1)
    logger_level: str = "warn"
    backend: Optional[Union[str, BackendSpec]] = None
    plugins: Optional[List[Union[str, PluginSpec]]] = None
    logging: Optional[Dict[str, Any]] = None

    class Config:
        extra = "forbid"

    @validator("name")
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be blank")
        return v

    @validator("logger_level", pre=True)
    def _known_level(cls, v: Any) -> str:
        if v is None:
            return "warn"
        parse_level(str(v))
        return str(v).strip().lower()
