"""Notification history: a capped, newest-first log of scheduled reminders."""

import json
import logging
import threading
from typing import List

from .errors import StorageError
from .notification_record import NotificationRecord

logger = logging.getLogger(__name__)

HISTORY_KEY = "notifications"
HISTORY_LIMIT = 50


class NotificationHistory:
    """
    Reminder history kept as one JSON list under a key/value store key.

    Every operation reads the full list, changes it and writes the whole
    list back; a lock serializes those read-modify-write cycles.
    """

    def __init__(self, store, key: str = HISTORY_KEY, limit: int = HISTORY_LIMIT):
        self.store = store
        self.key = key
        self.limit = limit
        self._lock = threading.RLock()

    def _read(self) -> List[NotificationRecord]:
        raw = self.store.get(self.key)
        if not raw:
            return []
        try:
            return [NotificationRecord.from_dict(d) for d in json.loads(raw)]
        except (ValueError, TypeError, KeyError) as exc:
            logger.error("Corrupt notification history under %r: %s", self.key, exc)
            raise StorageError(f"Corrupt notification history: {exc}") from exc

    def _write(self, records: List[NotificationRecord]) -> None:
        self.store.set(self.key, json.dumps([r.to_dict() for r in records]))

    def all(self) -> List[NotificationRecord]:
        """Records, most recent first."""
        return self._read()

    def append(self, record: NotificationRecord) -> None:
        """Insert at the head, keeping only the most recent `limit` records."""
        with self._lock:
            records = self._read()
            records.insert(0, record)
            dropped = len(records) - self.limit
            self._write(records[: self.limit])
        if dropped > 0:
            logger.debug("History full, dropped %d oldest record(s)", dropped)
        logger.info("Saved notification to history: %s", record.title)

    def mark_read(self, record_id: str) -> bool:
        """Mark one record read. Returns False when the id is unknown."""
        with self._lock:
            records = self._read()
            found = False
            for record in records:
                if record.id == record_id:
                    record.read = True
                    found = True
            if found:
                self._write(records)
        return found

    def mark_all_read(self) -> None:
        with self._lock:
            records = self._read()
            for record in records:
                record.read = True
            self._write(records)

    def count_unread(self) -> int:
        return sum(1 for r in self._read() if not r.read)

    def clear(self) -> None:
        with self._lock:
            self._write([])
        logger.info("Notification history cleared")
