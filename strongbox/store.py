"""
State Store
The durable string -> bytes mapping every component reads and writes.

The core consumes a store; it does not own one. Two implementations ship
for embedding and tests:

  MemoryStore: a dict, lost on exit
  FileStore: one file per key under a directory, survives restarts

Every request runs inside a Transaction: writes are staged in an overlay
and reach the underlying store only on commit. A request that fails never
leaves a partial write behind, including when the underlying store itself
fails in the middle of a commit.
"""

import hashlib
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from strongbox import config


class StateStore(ABC):
    """Abstract key-value store consumed by the Strongbox core."""

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Return the value for key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Write value under key, replacing any previous value."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key. Removing an absent key is a no-op."""

    def has(self, key: str) -> bool:
        return self.get(key) is not None


class MemoryStore(StateStore):
    """In-process store backed by a dict."""

    def __init__(self, data: dict[str, bytes] = None):
        self.data = dict(data or {})

    def get(self, key: str) -> bytes | None:
        return self.data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.data[key] = bytes(value)

    def delete(self, key: str) -> None:
        self.data.pop(key, None)

    def snapshot(self) -> dict[str, bytes]:
        """Copy of the current contents."""
        return dict(self.data)


class FileStore(StateStore):
    """
    Directory-backed store. One file per key.

    File names are the SHA-256 hex digest of the key, so any key, however
    long or whatever characters it holds, maps to a flat fixed-length name.
    Each file starts with its own key behind a 4-byte length header, which
    is what keys() reads back. Writes go to a temp file first and are moved
    into place atomically.

    Args:
        store_dir: Directory holding the entries. Created if missing.
            Defaults to STRONGBOX_STORE_DIR.
    """

    def __init__(self, store_dir: str | Path | None = None):
        self.store_dir = Path(store_dir or config.STORE_DIR)
        self.store_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        name = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.store_dir / f"{name}.entry"

    @staticmethod
    def _split(blob: bytes) -> tuple[str, bytes]:
        size = int.from_bytes(blob[:4], "big")
        return blob[4:4 + size].decode("utf-8"), blob[4 + size:]

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        _, value = self._split(path.read_bytes())
        return value

    def set(self, key: str, value: bytes) -> None:
        header = key.encode("utf-8")
        fd, tmp = tempfile.mkstemp(dir=self.store_dir, suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(len(header).to_bytes(4, "big") + header + value)
            os.replace(tmp, self._path(key))
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)

    def keys(self) -> list[str]:
        """All keys currently stored."""
        return sorted(
            self._split(f.read_bytes())[0]
            for f in self.store_dir.glob("*.entry")
        )


_DELETED = object()


class Transaction(StateStore):
    """
    Request-scoped overlay over a backing store.

    Reads see the transaction's own staged writes first. Nothing reaches
    the backing store until commit(); discard() drops everything staged.

    Usage:
        with Transaction(store) as txn:
            handler(txn)
        # committed if the block returned, discarded if it raised
    """

    def __init__(self, backing: StateStore):
        self.backing = backing
        self._staged: dict[str, object] = {}

    def get(self, key: str) -> bytes | None:
        if key in self._staged:
            value = self._staged[key]
            return None if value is _DELETED else value
        return self.backing.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._staged[key] = bytes(value)

    def delete(self, key: str) -> None:
        self._staged[key] = _DELETED

    @property
    def pending(self) -> int:
        """Number of staged writes and deletes."""
        return len(self._staged)

    def commit(self) -> None:
        """
        Apply staged changes to the backing store.

        If the backing store raises partway, every key already touched is
        put back to its previous value (or removed, if it was absent) before
        the error propagates.
        """
        applied: list[tuple[str, bytes | None]] = []
        try:
            for key, value in self._staged.items():
                applied.append((key, self.backing.get(key)))
                if value is _DELETED:
                    self.backing.delete(key)
                else:
                    self.backing.set(key, value)
        except BaseException:
            self._restore(applied)
            raise
        finally:
            self._staged.clear()

    def _restore(self, applied: list[tuple[str, bytes | None]]) -> None:
        for key, previous in reversed(applied):
            if previous is None:
                self.backing.delete(key)
            else:
                self.backing.set(key, previous)

    def discard(self) -> None:
        self._staged.clear()

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            self.commit()
        else:
            self.discard()
        return False
