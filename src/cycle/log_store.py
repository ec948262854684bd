"""Daily log collection persisted through a ``KeyValueStore``.

Logs are stored as one JSON list under ``lunaloop_logs`` in insertion
order (the CSV export keeps that order).  ``date`` is the unique key.

An empty store is a normal state: every read returns ``[]`` / ``None``
rather than raising, and invalid persisted entries are skipped one by one
so a single bad record never hides the rest.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from src.models.tracking import LogEntry, LogEntryUpdate
from src.services.storage import KeyValueStore

logger = logging.getLogger("lunaloop.cycle.log_store")

STORAGE_KEYS = {
    "USER": "lunaloop_user",
    "LOGS": "lunaloop_logs",
    "SETTINGS": "lunaloop_settings",
    "REMINDERS": "lunaloop_reminders",
}


class LogStore:
    """CRUD over the daily log list."""

    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    def get_all(self) -> list[LogEntry]:
        """Return every valid log entry in stored order."""
        raw = self._store.get(STORAGE_KEYS["LOGS"], [])
        if not isinstance(raw, list):
            logger.warning("Stored logs are not a list (%s) — treating as empty", type(raw).__name__)
            return []

        entries: list[LogEntry] = []
        for item in raw:
            try:
                entries.append(LogEntry.model_validate(item))
            except ValidationError as exc:
                logger.warning("Skipping invalid log entry %r: %s", item, exc.errors()[:1])
        return entries

    def get_by_date(self, date_str: str) -> LogEntry | None:
        for entry in self.get_all():
            if entry.date == date_str:
                return entry
        return None

    def upsert(self, entry: LogEntry) -> bool:
        """Save a full entry, replacing any entry for the same date.

        Returns:
            True if this created a new date, False if it replaced one.
        """
        logs = self.get_all()
        for i, existing in enumerate(logs):
            if existing.date == entry.date:
                logs[i] = entry
                self._save(logs)
                return False
        logs.append(entry)
        self._save(logs)
        return True

    def merge(self, date_str: str, update: LogEntryUpdate) -> LogEntry | None:
        """Apply a partial update to an existing entry.

        Fields not explicitly set on ``update`` keep their stored values.

        Returns:
            The merged entry, or None if no entry exists for ``date_str``.
        """
        logs = self.get_all()
        changes = update.model_dump(exclude_unset=True)
        for i, existing in enumerate(logs):
            if existing.date == date_str:
                merged = LogEntry.model_validate({**existing.model_dump(), **changes})
                logs[i] = merged
                self._save(logs)
                return merged
        return None

    def delete(self, date_str: str) -> bool:
        """Remove the entry for ``date_str``.  Returns False if none existed."""
        logs = self.get_all()
        kept = [entry for entry in logs if entry.date != date_str]
        if len(kept) == len(logs):
            return False
        self._save(kept)
        return True

    def replace_all(self, entries: list[LogEntry]) -> None:
        self._save(entries)

    def _save(self, entries: list[LogEntry]) -> None:
        self._store.set(STORAGE_KEYS["LOGS"], [entry.to_store() for entry in entries])
