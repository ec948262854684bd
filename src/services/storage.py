"""Key-value store collaborator.

The engine never touches files directly; it reads and writes JSON values
through a ``KeyValueStore``.  Two implementations ship:

- ``JsonFileStore``  — one ``<key>.json`` file per key under a data dir.
- ``InMemoryStore``  — dict-backed, used in tests and for ephemeral runs.

Contract (both implementations):

- ``get(key, default)`` never raises.  Missing keys and malformed JSON
  both resolve to ``default``.
- ``set(key, value)`` is best-effort.  Failures are logged, never raised.

Usage::

    store = JsonFileStore(Path(".lunaloop"))
    store.set("lunaloop_settings", {"cycleLength": 29})
    store.get("lunaloop_settings", {})   # {'cycleLength': 29}
"""

from __future__ import annotations

import json
import logging
import re
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

logger = logging.getLogger("lunaloop.storage")

# Keys map straight to file names, so keep them to a safe alphabet
_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class KeyValueStore(ABC):
    """JSON value store keyed by string."""

    def get(self, key: str, default: Any = None) -> Any:
        """Return the decoded value for ``key`` or ``default``."""
        raw = self._read(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError, ValueError):
            logger.warning("Malformed JSON under key %r — using default", key)
            return default

    def set(self, key: str, value: Any) -> None:
        """Encode and write ``value``.  Errors are logged, not raised."""
        try:
            encoded = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.error("Error saving %s: value is not JSON-serializable (%s)", key, exc)
            return
        try:
            self._write(key, encoded)
        except OSError as exc:
            logger.error("Error saving %s: %s", key, exc)

    @abstractmethod
    def _read(self, key: str) -> str | None:
        """Return the raw stored text, or None when absent."""

    @abstractmethod
    def _write(self, key: str, raw: str) -> None:
        """Persist raw text under ``key``."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    @abstractmethod
    def keys(self) -> list[str]:
        """Return every stored key."""

    def clear(self) -> None:
        """Remove every key."""
        for key in self.keys():
            self.delete(key)


class InMemoryStore(KeyValueStore):
    """Dict-backed store.  Values are kept as encoded JSON text so the
    malformed-data path behaves exactly like the file store."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._data: dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set(key, value)

    def put_raw(self, key: str, raw: str) -> None:
        """Store raw text without encoding (to simulate corrupt data)."""
        self._data[key] = raw

    def _read(self, key: str) -> str | None:
        return self._data.get(key)

    def _write(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class JsonFileStore(KeyValueStore):
    """File-per-key store rooted at ``root``.

    Writes go to a temp file first and are renamed into place so a crash
    mid-write never leaves a truncated value behind.
    """

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)
        self._lock = threading.Lock()

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid store key: {key!r}")
        return self._root / f"{key}.json"

    def _read(self, key: str) -> str | None:
        try:
            return self._path(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, ValueError) as exc:
            logger.warning("Could not read %s: %s", key, exc)
            return None

    def _write(self, key: str, raw: str) -> None:
        try:
            path = self._path(key)
        except ValueError as exc:
            raise OSError(str(exc)) from exc
        with self._lock:
            self._root.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".json.tmp")
            tmp.write_text(raw, encoding="utf-8")
            tmp.replace(path)

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except (OSError, ValueError) as exc:
            logger.error("Could not delete %s: %s", key, exc)

    def keys(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(p.stem for p in self._root.glob("*.json"))
