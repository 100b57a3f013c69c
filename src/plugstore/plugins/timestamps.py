from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from plugstore.base import ABSENT

from .base import BasePlugin, plugin_aliases
from .ttl import now_ms

if TYPE_CHECKING:  # pragma: no cover - typing only
    from plugstore.store import SimpleStore


@plugin_aliases("timestamps", "time")
class TimestampsPlugin(BasePlugin):
    """Record when each key was created and last updated.

    Brief:
      Stores {"create_time": ms} under metadata kind "time" the first time a
      key is written, and adds/refreshes "update_time" on later overwrites.
      Times are epoch milliseconds so snapshots stay JSON-serializable.

    Example in YAML config:

        plugins:
          - ttl
          - timestamps
    """

    kind = "time"

    def capabilities(self) -> Dict[str, Callable[..., Any]]:
        return {"get_times": self.get_times}

    def get_times(self, store: "SimpleStore", key: str) -> Optional[Dict[str, int]]:
        """Return a copy of the {"create_time", "update_time"} record for key."""

        record = store.get_meta(self.kind, key)
        if record is ABSENT or not isinstance(record, dict):
            return None
        return dict(record)

    def on_set(
        self,
        store: "SimpleStore",
        key: str,
        new_value: Any,
        options: Mapping[str, Any],
        old_value: Any,
    ) -> None:
        stamp = now_ms()
        if old_value is ABSENT:
            store.set_meta(self.kind, key, {"create_time": stamp})
            return

        record = self.get_times(store, key) or {}
        record["update_time"] = stamp
        store.set_meta(self.kind, key, record)
