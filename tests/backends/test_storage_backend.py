"""
Brief: Tests for plugstore.backends.base.StorageBackend write-back plumbing.

Inputs:
  - None

Outputs:
  - None
"""

import threading

import pytest

from plugstore.backends.base import StorageBackend, StorageError
from plugstore.backends.memory import MemoryBackend


class GatedBackend(StorageBackend):
    """Backend whose writes block until the test releases them."""

    def __init__(self):
        super().__init__()
        self.gate = threading.Event()
        self.saved = []

    def load_sync(self, namespace):
        return None

    def save_sync(self, namespace, snapshot):
        self.gate.wait(5)
        self.saved.append((namespace, snapshot))


class RaisingBackend(StorageBackend):
    def load_sync(self, namespace):
        return None

    def save_sync(self, namespace, snapshot):
        raise StorageError("disk full")


def test_base_methods_require_subclass():
    """
    Brief: load_sync/save_sync are abstract on the base class.

    Inputs:
      - None

    Outputs:
      - None: Asserts NotImplementedError
    """
    backend = StorageBackend()
    with pytest.raises(NotImplementedError):
        backend.load_sync("x")
    with pytest.raises(NotImplementedError):
        backend.save_sync("x", {})


def test_save_async_copies_at_request_time():
    """
    Brief: Mutations after save_async() do not leak into the queued write.

    Inputs:
      - snapshot mutated while the write is blocked

    Outputs:
      - None: Asserts saved payload matches request-time content
    """
    backend = GatedBackend()
    snapshot = {"a": [1]}
    backend.save_async("ns", snapshot)
    snapshot["a"].append(2)
    snapshot["b"] = 3
    backend.gate.set()
    assert backend.flush(5) is True
    assert backend.saved == [("ns", {"a": [1]})]
    backend.close()


def test_writes_land_in_request_order():
    """
    Brief: Queued writes run one at a time in submission order.

    Inputs:
      - three snapshots

    Outputs:
      - None: Asserts order
    """
    backend = GatedBackend()
    backend.gate.set()
    for i in range(3):
        backend.save_async("ns", {"n": i})
    backend.flush(5)
    assert [s["n"] for _, s in backend.saved] == [0, 1, 2]
    backend.close()


def test_callbacks_report_outcome():
    """
    Brief: on_success / on_failure receive the write result.

    Inputs:
      - succeeding and failing backends

    Outputs:
      - None: Asserts callback invocations
    """
    events = []
    ok = MemoryBackend()
    ok.save_async("ns", {}, on_success=lambda: events.append("ok"))
    ok.flush(5)

    bad = RaisingBackend()
    bad.save_async("ns", {}, on_failure=lambda exc: events.append(str(exc)))
    bad.flush(5)

    assert events == ["ok", "disk full"]
    ok.close()
    bad.close()


def test_uncopyable_snapshot_fails_immediately():
    """
    Brief: A snapshot that cannot be deep-copied is reported as a failure.

    Inputs:
      - snapshot holding a lock

    Outputs:
      - None: Asserts on_failure called with TypeError
    """
    errors = []
    backend = MemoryBackend()
    backend.save_async("ns", {"lock": threading.Lock()}, on_failure=errors.append)
    assert len(errors) == 1
    assert isinstance(errors[0], TypeError)
    backend.close()


def test_save_after_close_fails():
    """
    Brief: Writes requested after close() fail with StorageError.

    Inputs:
      - closed backend

    Outputs:
      - None: Asserts failure callback
    """
    errors = []
    backend = MemoryBackend()
    backend.close()
    backend.save_async("ns", {}, on_failure=errors.append)
    assert isinstance(errors[0], StorageError)


def test_flush_without_pending_is_true():
    """
    Brief: flush() returns True immediately when idle.

    Inputs:
      - None

    Outputs:
      - None: Asserts True
    """
    assert MemoryBackend().flush(0) is True
