from __future__ import annotations

import copy
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[], None]
FailureCallback = Callable[[BaseException], None]


class StorageError(OSError):
    """Raised by backends when a snapshot cannot be read or written."""


def backend_aliases(*aliases: str):
    """Brief: Decorator to set aliases on a storage backend class for discovery.

    Inputs:
      - *aliases: Variable number of alias strings.

    Outputs:
      - Callable that applies the aliases to a StorageBackend subclass and
        returns it.

    Example:
      >>> @backend_aliases('memory', 'in_memory')
      ... class MemoryBackend(StorageBackend):
      ...     pass
      >>> MemoryBackend.aliases
      ('memory', 'in_memory')
    """

    def _wrap(cls: type) -> type:
        cls.aliases = tuple(aliases)
        return cls

    return _wrap


class StorageBackend:
    """Base class for durable snapshot storage.

    Brief:
      A backend persists one opaque snapshot (a JSON/pickle friendly mapping)
      per namespace. Stores read it once, synchronously, at construction and
      write it back asynchronously after every mutation.

    Inputs:
      - None.

    Outputs:
      - StorageBackend instance.

    Notes:
      - Subclasses implement load_sync() and save_sync(). save_async() is
        provided here: it deep-copies the snapshot at request time and runs
        save_sync() on a single worker thread, so writes land in request order.
    """

    aliases: tuple[str, ...] = ()

    def __init__(self) -> None:
        self._executor: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []
        self._lock = threading.Lock()
        self._closed = False

    def load_sync(self, namespace: str) -> Any | None:
        """Brief: Read the stored snapshot for namespace.

        Inputs:
          - namespace: Store name.

        Outputs:
          - Snapshot object, or None when nothing has been stored yet.

        Raises:
          - StorageError (or another exception) on I/O failure or corrupt data.
        """

        raise NotImplementedError(
            "StorageBackend.load_sync() must be implemented by a subclass"
        )

    def save_sync(self, namespace: str, snapshot: Any) -> None:
        """Brief: Persist snapshot for namespace, replacing any previous one.

        Inputs:
          - namespace: Store name.
          - snapshot: Snapshot object (already copied by save_async()).

        Outputs:
          - None.
        """

        raise NotImplementedError(
            "StorageBackend.save_sync() must be implemented by a subclass"
        )

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix=f"plugstore-{type(self).__name__}"
            )
        return self._executor

    def save_async(
        self,
        namespace: str,
        snapshot: Any,
        on_success: Optional[SuccessCallback] = None,
        on_failure: Optional[FailureCallback] = None,
    ) -> None:
        """Brief: Request a fire-and-forget write of snapshot.

        Inputs:
          - namespace: Store name.
          - snapshot: Current snapshot; copied before this call returns.
          - on_success: Optional callable invoked after a successful write.
          - on_failure: Optional callable invoked with the exception when the
            write (or the copy) fails.

        Outputs:
          - None. Outcomes are only observable through the callbacks.
        """

        try:
            payload = copy.deepcopy(snapshot)
        except Exception as exc:
            self._notify(on_failure, exc)
            return

        def _job() -> None:
            try:
                self.save_sync(namespace, payload)
            except Exception as exc:
                self._notify(on_failure, exc)
                return
            self._notify(on_success)

        with self._lock:
            if self._closed:
                self._notify(on_failure, StorageError("backend is closed"))
                return
            self._pending = [f for f in self._pending if not f.done()]
            self._pending.append(self._get_executor().submit(_job))

    @staticmethod
    def _notify(callback: Optional[Callable[..., None]], *args: Any) -> None:
        if callback is None:
            return
        try:
            callback(*args)
        except Exception:  # pragma: no cover - defensive logging only
            logger.warning("storage callback %r raised", callback, exc_info=True)

    def flush(self, timeout: Optional[float] = None) -> bool:
        """Brief: Wait for pending save_async() writes.

        Inputs:
          - timeout: Optional seconds to wait.

        Outputs:
          - bool: True when every pending write finished.
        """

        with self._lock:
            pending = list(self._pending)
        if not pending:
            return True
        _done, not_done = wait(pending, timeout=timeout)
        return not not_done

    def close(self) -> None:
        """Finish pending writes and release the worker thread."""

        with self._lock:
            self._closed = True
            executor, self._executor = self._executor, None
            self._pending = []
        if executor is not None:
            executor.shutdown(wait=True)
