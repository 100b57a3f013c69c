from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from plugstore.base import ABSENT

from .base import BasePlugin, plugin_aliases

if TYPE_CHECKING:  # pragma: no cover - typing only
    from plugstore.store import SimpleStore


@plugin_aliases("dump", "debug_dump")
class DumpPlugin(BasePlugin):
    """Export stored content annotated with its metadata.

    Brief:
      Adds dump(key=None) to the store. Each exported value is a deep copy of
      the stored data with one "[<kind>]" entry per metadata kind holding the
      key, e.g. {"x": 1, "[ttl]": 1700000000000}. Values that are not
      mappings are wrapped as {"value": <data>, ...}. The reserved meta key is
      never exported, and dumping does not trigger lazy expiration.
    """

    def capabilities(self) -> Dict[str, Callable[..., Any]]:
        return {"dump": self.dump}

    @staticmethod
    def _annotate(value: Any, meta: Dict[str, Any]) -> Dict[str, Any]:
        if isinstance(value, dict):
            content = copy.deepcopy(value)
        else:
            content = {"value": copy.deepcopy(value)}
        for kind, meta_value in meta.items():
            content[f"[{kind}]"] = copy.deepcopy(meta_value)
        return content

    def dump(self, store: "SimpleStore", key: Optional[str] = None) -> Any:
        """Brief: Return annotated content for one key or for the whole store.

        Inputs:
          - store: Source store.
          - key: Optional key. When omitted, every data key is exported.

        Outputs:
          - dict for a single key (None when the key holds no data), or
            {key: annotated_value} for the whole store.
        """

        if key is not None:
            value = store.raw_get(key)
            if value is ABSENT:
                return None
            return self._annotate(value, store.meta.for_key(key))

        return {
            k: self._annotate(store.raw_get(k), store.meta.for_key(k))
            for k in store.keys()
        }
