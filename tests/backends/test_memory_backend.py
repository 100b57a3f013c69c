"""
Brief: Tests for plugstore.backends.memory.MemoryBackend.

Inputs:
  - None

Outputs:
  - None
"""

from plugstore.backends.memory import MemoryBackend


def test_missing_namespace_loads_none():
    """
    Brief: Unknown namespaces load as None.

    Inputs:
      - None

    Outputs:
      - None: Asserts None
    """
    assert MemoryBackend().load_sync("nope") is None


def test_round_trip_is_isolated():
    """
    Brief: Loaded snapshots are copies independent from stored ones.

    Inputs:
      - nested snapshot

    Outputs:
      - None: Asserts isolation between stored and loaded copies
    """
    backend = MemoryBackend()
    original = {"a": {"x": 1}}
    backend.save_sync("c1", original)
    original["a"]["x"] = 2
    loaded = backend.load_sync("c1")
    assert loaded == {"a": {"x": 1}}
    loaded["a"]["x"] = 3
    assert backend.load_sync("c1") == {"a": {"x": 1}}
