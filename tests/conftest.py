"""
Brief: Global pytest configuration enforcing per-test 10s timeout.

Inputs:
  - None

Outputs:
  - None
"""

import os
import signal
import sys

import pytest

# Ensure 'src' is on sys.path so 'plugstore' package is importable in tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
SRC_DIR = os.path.join(ROOT, "src")
if SRC_DIR not in sys.path:
    sys.path.insert(0, SRC_DIR)


def _alarm_handler(signum, frame):
    """
    Brief: Signal handler that raises TimeoutError when alarm triggers.

    Inputs:
      - signum: signal number (int)
      - frame: current frame (ignored)

    Outputs:
      - None: Raises TimeoutError to fail the test
    """
    raise TimeoutError("Test exceeded 10 seconds")


# Install handler if supported on this platform
if hasattr(signal, "SIGALRM"):
    signal.signal(signal.SIGALRM, _alarm_handler)


@pytest.fixture(autouse=True)
def enforce_test_timeout():
    """
    Brief: Enforce a hard 10-second timeout for each test.

    Inputs:
      - None

    Outputs:
      - None: Cancels alarm after test
    """
    if hasattr(signal, "SIGALRM"):
        signal.alarm(10)
        try:
            yield
        finally:
            signal.alarm(0)
    else:
        # Fallback: no-op on platforms without SIGALRM
        yield


class FakeClock:
    """
    Brief: Controllable replacement for plugstore.plugins.ttl.now_ms.

    Inputs:
      - start: initial epoch milliseconds

    Outputs:
      - Callable returning the current fake time; advance(ms) moves it forward
    """

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock(monkeypatch):
    """
    Brief: Patch TTL/timestamp plugins to use a FakeClock.

    Inputs:
      - monkeypatch: pytest fixture

    Outputs:
      - FakeClock instance shared by the ttl and timestamps plugin modules
    """
    from plugstore.plugins import timestamps, ttl

    fake = FakeClock()
    monkeypatch.setattr(ttl, "now_ms", fake)
    monkeypatch.setattr(timestamps, "now_ms", fake)
    return fake


@pytest.fixture
def memory_backend():
    """
    Brief: Fresh MemoryBackend closed after the test.

    Inputs:
      - None

    Outputs:
      - MemoryBackend instance
    """
    from plugstore.backends.memory import MemoryBackend

    backend = MemoryBackend()
    yield backend
    backend.close()
