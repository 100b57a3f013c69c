"""
Brief: Tests for plugstore.metadata.MetadataStore.

Inputs:
  - None

Outputs:
  - None
"""

import logging

from plugstore.base import ABSENT
from plugstore.metadata import MetadataStore, initial_meta


def test_initial_meta_has_empty_ttl_kind():
    """
    Brief: A fresh meta mapping holds an empty "ttl" kind.

    Inputs:
      - None

    Outputs:
      - None: Asserts layout and that the kind counts as empty
    """
    mapping = initial_meta()
    assert mapping == {"ttl": {}}
    assert MetadataStore(mapping).has_kind("ttl") is False


def test_set_creates_kind_lazily_and_writes_through():
    """
    Brief: set() creates missing kinds in the underlying mapping.

    Inputs:
      - empty mapping

    Outputs:
      - None: Asserts mapping mutated in place
    """
    mapping = {}
    meta = MetadataStore(mapping)
    assert meta.set("time", "a", {"create_time": 1}) is True
    assert mapping == {"time": {"a": {"create_time": 1}}}
    assert meta.get("time", "a") == {"create_time": 1}


def test_get_missing_returns_default():
    """
    Brief: Missing kinds and keys report ABSENT or the given default.

    Inputs:
      - empty mapping

    Outputs:
      - None: Asserts defaults
    """
    meta = MetadataStore({})
    assert meta.get("ttl", "a") is ABSENT
    assert meta.get("ttl", "a", None) is None


def test_set_none_stores_none():
    """
    Brief: None is a regular metadata value; only ABSENT clears.

    Inputs:
      - value None

    Outputs:
      - None: Asserts stored None
    """
    meta = MetadataStore({})
    meta.set("k", "a", None)
    assert meta.get("k", "a") is None
    assert meta.has_kind("k")


def test_clear_prunes_empty_kinds():
    """
    Brief: Clearing the last entry removes the kind.

    Inputs:
      - one entry then ABSENT

    Outputs:
      - None: Asserts pruning
    """
    mapping = {}
    meta = MetadataStore(mapping)
    meta.set("ttl", "a", 5)
    assert meta.set("ttl", "a", ABSENT) is True
    assert mapping == {}
    assert meta.kinds() == []


def test_clear_missing_warns(caplog):
    """
    Brief: Clearing a missing entry logs a warning and returns False.

    Inputs:
      - caplog: pytest fixture

    Outputs:
      - None: Asserts False and warning text
    """
    meta = MetadataStore({}, logging.getLogger("meta-test"))
    with caplog.at_level(logging.WARNING):
        assert meta.clear("ttl", "a") is False
    assert "clear meta failed" in caplog.text


def test_clear_key_spans_kinds():
    """
    Brief: clear_key() removes the key from every kind and reports them.

    Inputs:
      - key present in two kinds

    Outputs:
      - None: Asserts removed kinds and remaining entries
    """
    mapping = {"ttl": {"a": 1, "b": 2}, "time": {"a": {}}}
    meta = MetadataStore(mapping)
    assert sorted(meta.clear_key("a")) == ["time", "ttl"]
    assert mapping == {"ttl": {"b": 2}}
    assert meta.clear_key("zzz") == []


def test_entries_and_for_key():
    """
    Brief: entries() copies one kind; for_key() collects across kinds.

    Inputs:
      - populated mapping

    Outputs:
      - None: Asserts views
    """
    mapping = {"ttl": {"a": 1}, "time": {"a": 2, "b": 3}, "odd": "not-a-map"}
    meta = MetadataStore(mapping)
    entries = meta.entries("time")
    entries["c"] = 4
    assert "c" not in mapping["time"]
    assert meta.for_key("a") == {"ttl": 1, "time": 2}
    assert list(meta) == ["ttl", "time"]
