"""Single JSON document shared by the ledger and reservation repositories.

Keeping materials and reservations in one file means a fulfillment (ledger
decrement + status change) is one file write, so a crash can never leave
the two halves out of step.

Several processes may share the file (a long-running sweeper next to
one-shot CLI commands), so every write happens under an exclusive
``flock`` on a ``<name>.lock`` sidecar, and a transaction reads the
document only once that lock is held.
"""

from __future__ import annotations

import fcntl
import json
import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

_EMPTY: dict[str, Any] = {
    "materials": [],
    "reservations": [],
    "next_material_id": 1,
    "next_reservation_id": 1,
}


class JsonDataStore:
    """Thread- and process-safe access to the JSON document, with transactions.

    Inside ``transaction()`` every ``load()`` returns the same in-memory
    document and ``persist()`` only updates it; the file is written once
    when the outermost transaction exits cleanly and not at all if it
    raises. Outside a transaction each ``persist()`` writes immediately.
    The thread lock is re-entrant and, like the file lock, held for the
    whole transaction, so neither other threads nor other processes can
    commit in between the read and the write.
    """

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock_path = file_path.with_suffix(file_path.suffix + ".lock")
        self._lock = threading.RLock()
        self._pending: dict[str, Any] | None = None
        self._ensure_file()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._pending is not None:
                # Nested: join the outer transaction.
                yield
                return

            with self._file_lock():
                self._pending = self._read()
                try:
                    yield
                except BaseException:
                    self._pending = None
                    raise
                document, self._pending = self._pending, None
                self._write(document)

    def load(self) -> dict[str, Any]:
        with self._lock:
            if self._pending is not None:
                return self._pending
            return self._read()

    def persist(self, document: dict[str, Any]) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending = document
            else:
                with self._file_lock():
                    self._write(document)

    # --- File helpers ---------------------------------------------------------

    @contextmanager
    def _file_lock(self) -> Iterator[None]:
        # Released when the descriptor is closed.
        with open(self._lock_path, "a", encoding="utf-8") as handle:
            fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
            yield

    def _read(self) -> dict[str, Any]:
        document = json.loads(self._file_path.read_text(encoding="utf-8"))
        for key, default in _EMPTY.items():
            document.setdefault(key, list(default) if isinstance(default, list) else default)
        return document

    def _write(self, document: dict[str, Any]) -> None:
        # Write-then-rename so readers never see a half-written file.
        tmp_path = self._file_path.with_suffix(self._file_path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        os.replace(tmp_path, self._file_path)

    def _ensure_file(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        with self._file_lock():
            if not self._file_path.exists():
                self._write(json.loads(json.dumps(_EMPTY)))
