from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional

from pydantic import BaseModel, Field

from plugstore.base import ABSENT
from plugstore.metadata import TTL_KIND

from .base import BasePlugin, plugin_aliases

if TYPE_CHECKING:  # pragma: no cover - typing only
    from plugstore.store import SimpleStore


def now_ms() -> int:
    """Return the current wall-clock time as epoch milliseconds."""

    return int(time.time() * 1000)


class TtlConfig(BaseModel):
    """Brief: Typed configuration model for TtlPlugin.

    Inputs:
      - default_ttl: Optional lifetime in milliseconds applied when set() is
        called without a "ttl" option. None (default) means no expiry.

    Outputs:
      - TtlConfig instance.
    """

    default_ttl: Optional[int] = Field(default=None, ge=1)

    class Config:
        extra = "forbid"


@plugin_aliases("ttl", "expiry")
class TtlPlugin(BasePlugin):
    """Time-to-live expiration for store entries.

    Brief:
      - set(key, value, {"ttl": ms}) stores an absolute expiry
        (now + ms, epoch milliseconds) under metadata kind "ttl".
      - get()/has() lazily delete entries whose expiry has passed and report
        them as absent to the rest of the chain.
      - Adds set_ttl/set_ttl_value/clear_ttl/get_ttl/purge_expired to the
        store surface.

    Example:
        >>> from plugstore import SimpleStore
        >>> store = SimpleStore("c1")
        >>> store.set("a", {"x": 1}, {"ttl": 50})
        >>> store.get("a")
        {'x': 1}
    """

    kind = TTL_KIND

    @classmethod
    def get_config_model(cls):
        return TtlConfig

    def __init__(self, **config: object) -> None:
        super().__init__(**config)
        self.default_ttl: Optional[int] = self.options.default_ttl

    def capabilities(self) -> Dict[str, Callable[..., Any]]:
        return {
            "set_ttl": self.set_ttl,
            "set_ttl_value": self.set_ttl_value,
            "clear_ttl": self.clear_ttl,
            "get_ttl": self.get_ttl,
            "purge_expired": self.purge_expired,
        }

    def set_ttl(self, store: "SimpleStore", key: str, ttl: Any = None) -> bool:
        """Brief: Set or clear the lifetime of key.

        Inputs:
          - store: Target store.
          - key: Data key.
          - ttl: Lifetime in milliseconds. A truthy value stores an absolute
            expiry; None/0/ABSENT clears any existing expiry.

        Outputs:
          - bool: Result of the underlying metadata write/clear.
        """

        if ttl:
            return self.set_ttl_value(store, key, ttl)
        return self.clear_ttl(store, key)

    def set_ttl_value(self, store: "SimpleStore", key: str, ttl: Any) -> bool:
        """Brief: Store now + ttl (milliseconds) as the absolute expiry of key.

        Inputs:
          - store: Target store.
          - key: Data key.
          - ttl: int-like lifetime in milliseconds. Negative values produce an
            entry that is already expired.

        Outputs:
          - bool: True once stored, False when key holds no data.

        Raises:
          - ValueError when ttl is not numeric.
        """

        try:
            ttl_ms = int(ttl)
        except (TypeError, ValueError):
            raise ValueError(f"TTL for {key!r} must be a number of milliseconds, got {ttl!r}")
        return store.set_meta(self.kind, key, now_ms() + ttl_ms)

    def clear_ttl(self, store: "SimpleStore", key: str) -> bool:
        """Remove the expiry of key so it never expires."""

        return store.set_meta(self.kind, key, ABSENT)

    def get_ttl(self, store: "SimpleStore", key: str) -> Optional[int]:
        """Return the absolute expiry (epoch ms) of key, or None."""

        expiry = store.get_meta(self.kind, key)
        return None if expiry is ABSENT else expiry

    def is_expired(self, store: "SimpleStore", key: str) -> bool:
        expiry = store.get_meta(self.kind, key)
        if expiry is ABSENT or expiry is None:
            return False
        return now_ms() >= expiry

    def purge_expired(self, store: "SimpleStore") -> int:
        """Brief: Eagerly delete every expired key.

        Inputs:
          - store: Target store.

        Outputs:
          - int: Number of keys removed.
        """

        removed = 0
        for key in list(store.meta.entries(self.kind).keys()):
            if self.is_expired(store, key) and store.delete(key):
                removed += 1
        if removed:
            store.logger.debug("purged %d expired keys", removed)
        return removed

    def on_set(
        self,
        store: "SimpleStore",
        key: str,
        new_value: Any,
        options: Mapping[str, Any],
        old_value: Any,
    ) -> None:
        ttl = options.get(self.kind, self.default_ttl)
        # Overwrites never inherit a previous expiry, even when the new ttl is invalid.
        if self.get_ttl(store, key) is not None:
            self.clear_ttl(store, key)
        if ttl:
            self.set_ttl_value(store, key, ttl)

    def on_get(self, store: "SimpleStore", key: str, value: Any) -> Any:
        if value is ABSENT:
            return value

        expiry = store.get_meta(self.kind, key)
        if expiry is ABSENT or expiry is None or now_ms() < expiry:
            return value

        if store.delete(key):
            return ABSENT
        store.logger.warning("failed to delete expired key %r (expiry=%s)", key, expiry)
        return value
