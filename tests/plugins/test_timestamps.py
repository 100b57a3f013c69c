"""
Brief: Tests for plugstore.plugins.timestamps.TimestampsPlugin.

Inputs:
  - None

Outputs:
  - None
"""

import pytest

from plugstore import SimpleStore
from plugstore.plugins.registry import PluginRegistry
from plugstore.plugins.timestamps import TimestampsPlugin
from plugstore.plugins.ttl import TtlPlugin


@pytest.fixture
def store(memory_backend):
    reg = PluginRegistry()
    reg.install(TtlPlugin)
    reg.install(TimestampsPlugin)
    return SimpleStore("times", backend=memory_backend, plugins=reg)


def test_new_key_gets_create_time(store, clock):
    """
    Brief: The first write records create_time only.

    Inputs:
      - clock: FakeClock fixture

    Outputs:
      - None: Asserts record contents
    """
    store.set("a", 1)
    assert store.get_times("a") == {"create_time": clock.now}


def test_overwrite_adds_update_time(store, clock):
    """
    Brief: Overwrites keep create_time and refresh update_time.

    Inputs:
      - three writes at different times

    Outputs:
      - None: Asserts create_time preserved and update_time advanced
    """
    store.set("a", 1)
    created = clock.now
    clock.advance(5)
    store.set("a", 2)
    clock.advance(5)
    store.set("a", 3)
    assert store.get_times("a") == {"create_time": created, "update_time": clock.now}


def test_times_removed_with_key(store, clock):
    """
    Brief: Deleting a key drops its time metadata; re-creating starts over.

    Inputs:
      - delete then set again

    Outputs:
      - None: Asserts no update_time after re-creation
    """
    store.set("a", 1)
    store.delete("a")
    assert store.get_times("a") is None
    clock.advance(7)
    store.set("a", 1)
    assert store.get_times("a") == {"create_time": clock.now}


def test_get_times_returns_copy(store):
    """
    Brief: Mutating the returned record does not change stored metadata.

    Inputs:
      - record returned by get_times

    Outputs:
      - None: Asserts stored record unchanged
    """
    store.set("a", 1)
    record = store.get_times("a")
    record["create_time"] = -1
    assert store.get_times("a")["create_time"] != -1
