from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, MutableMapping

from .base import ABSENT

logger = logging.getLogger(__name__)

# Metadata kind reserved by the TTL plugin; always present in a fresh snapshot.
TTL_KIND = "ttl"


def initial_meta() -> Dict[str, Dict[str, Any]]:
    """Brief: Build the metadata mapping for an empty snapshot.

    Inputs:
      - None.

    Outputs:
      - dict: {"ttl": {}}.
    """

    return {TTL_KIND: {}}


class MetadataStore:
    """Brief: View over the reserved metadata mapping of a store snapshot.

    Inputs (constructor):
      - mapping: The mutable ``kind -> {key -> value}`` mapping stored under
        the snapshot's meta key. The view never copies it, so changes are
        visible to the snapshot (and therefore to write-backs) immediately.
      - log: Optional logger (or LoggerAdapter) used for clear warnings.

    Outputs:
      - MetadataStore instance.

    Notes:
      - Sub-maps are created lazily by set() and pruned once their last entry
        is cleared (the initial "ttl" kind included).
      - Missing kinds and missing keys are both reported as ABSENT; lookups
        never raise.

    Example:
      >>> meta = MetadataStore({})
      >>> meta.set("ttl", "a", 1000)
      True
      >>> meta.get("ttl", "a")
      1000
      >>> meta.clear("ttl", "a")
      True
      >>> meta.has_kind("ttl")
      False
    """

    def __init__(self, mapping: MutableMapping[str, Any], log: Any = None) -> None:
        self._mapping = mapping
        self._log = log if log is not None else logger

    @property
    def mapping(self) -> MutableMapping[str, Any]:
        return self._mapping

    def _kind_map(self, kind: str) -> MutableMapping[str, Any] | None:
        sub = self._mapping.get(kind)
        if isinstance(sub, dict):
            return sub
        return None

    def get(self, kind: str, key: str, default: Any = ABSENT) -> Any:
        """Brief: Return the metadata value for key under kind.

        Inputs:
          - kind: Metadata kind name (e.g. "ttl").
          - key: User data key.
          - default: Returned when there is no entry (ABSENT by default).

        Outputs:
          - Stored metadata value or default.
        """

        sub = self._kind_map(kind)
        if sub is None:
            return default
        return sub.get(key, default)

    def set(self, kind: str, key: str, value: Any = ABSENT) -> bool:
        """Brief: Store a metadata value, or clear it when value is ABSENT.

        Inputs:
          - kind: Metadata kind name.
          - key: User data key.
          - value: Any value to store; ABSENT clears the entry instead.

        Outputs:
          - bool: True on success, False when a clear found nothing to remove.
        """

        if value is ABSENT:
            return self.clear(kind, key)

        sub = self._kind_map(kind)
        if sub is None:
            sub = {}
            self._mapping[kind] = sub
        sub[key] = value
        return True

    def clear(self, kind: str, key: str) -> bool:
        """Brief: Remove the entry for key under kind.

        Inputs:
          - kind: Metadata kind name.
          - key: User data key.

        Outputs:
          - bool: True when an entry was removed; False (with a warning) when
            there was none.
        """

        sub = self._kind_map(kind)
        if sub is None or key not in sub:
            self._log.warning("clear meta failed, no %s entry for %r", kind, key)
            return False

        del sub[key]
        if not sub:
            self._mapping.pop(kind, None)
        return True

    def clear_key(self, key: str) -> List[str]:
        """Brief: Remove key from every metadata kind.

        Inputs:
          - key: User data key.

        Outputs:
          - list[str]: Kinds that held an entry for key.
        """

        removed: List[str] = []
        for kind in list(self._mapping.keys()):
            sub = self._kind_map(kind)
            if sub is not None and key in sub:
                del sub[key]
                removed.append(kind)
                if not sub:
                    self._mapping.pop(kind, None)
        return removed

    def has_kind(self, kind: str) -> bool:
        """Return True when kind currently holds at least one entry."""

        return bool(self._kind_map(kind))

    def kinds(self) -> List[str]:
        return [kind for kind in self._mapping.keys() if self.has_kind(kind)]

    def entries(self, kind: str) -> Dict[str, Any]:
        """Return a shallow copy of the ``key -> value`` map for kind."""

        sub = self._kind_map(kind)
        return dict(sub) if sub else {}

    def for_key(self, key: str) -> Dict[str, Any]:
        """Return ``{kind: value}`` for every kind holding an entry for key."""

        found: Dict[str, Any] = {}
        for kind in self.kinds():
            value = self.get(kind, key)
            if value is not ABSENT:
                found[kind] = value
        return found

    def __iter__(self) -> Iterator[str]:
        return iter(self.kinds())
