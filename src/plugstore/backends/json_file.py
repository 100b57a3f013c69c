from __future__ import annotations

import json
import os
import tempfile
import threading
from typing import Any
from urllib.parse import quote

from .base import StorageBackend, StorageError, backend_aliases


@backend_aliases("json", "json_file", "file")
class JsonFileBackend(StorageBackend):
    """JSON-file snapshot storage.

    Brief:
      Writes each namespace to ``<directory>/<namespace>.json``. Writes go to a
      temporary file first and are moved into place with os.replace(), so a
      crash never leaves a half-written snapshot behind.

    Inputs:
      - **config:
          - directory (str): Target directory (default './var/plugstore').
          - indent (int | None): Optional JSON indentation.

    Outputs:
      - JsonFileBackend instance.

    Notes:
      - Snapshots must be JSON-serializable; anything else fails the
        write-back (reported through the store's failure logging).
    """

    def __init__(self, **config: object) -> None:
        super().__init__()
        directory = config.get("directory") or "./var/plugstore"
        self.directory = os.path.abspath(os.path.expanduser(str(directory)))
        indent = config.get("indent")
        self.indent = int(indent) if isinstance(indent, int) else None
        self._io_lock = threading.RLock()

    def path_for(self, namespace: str) -> str:
        """Return the file path used for namespace.

        Names are percent-encoded, so distinct namespaces never share a file
        and separators cannot escape the directory.
        """

        safe = quote(namespace, safe="")
        return os.path.join(self.directory, f"{safe}.json")

    def load_sync(self, namespace: str) -> Any | None:
        path = self.path_for(namespace)
        with self._io_lock:
            if not os.path.exists(path):
                return None
            try:
                with open(path, "r", encoding="utf-8") as fh:
                    return json.load(fh)
            except (OSError, ValueError) as exc:
                raise StorageError(f"failed reading snapshot {path}: {exc}") from exc

    def save_sync(self, namespace: str, snapshot: Any) -> None:
        path = self.path_for(namespace)
        try:
            data = json.dumps(snapshot, indent=self.indent, sort_keys=True)
        except (TypeError, ValueError) as exc:
            raise StorageError(f"snapshot {namespace!r} is not JSON-serializable: {exc}") from exc

        with self._io_lock:
            try:
                os.makedirs(self.directory, exist_ok=True)
                fd, tmp_path = tempfile.mkstemp(
                    prefix=".plugstore-", suffix=".json", dir=self.directory
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(data)
                    os.replace(tmp_path, path)
                except BaseException:
                    if os.path.exists(tmp_path):
                        os.unlink(tmp_path)
                    raise
            except OSError as exc:
                raise StorageError(f"failed writing snapshot {path}: {exc}") from exc
