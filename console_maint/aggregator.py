"""
Upcoming maintenance aggregation.

Scans consoles and accessories, computes signed days remaining for each
item with a next maintenance date, and keeps those due within the
upcoming window (overdue items are always kept). Results are memoized in
an UpcomingCache for a short period.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Iterable, List, Optional, Tuple

from .dates import days_remaining, parse_date, start_of_day
from .errors import InvalidDateFormat
from .item import MaintainableItem
from .list_entry import MaintenanceListEntry

logger = logging.getLogger(__name__)

UPCOMING_WINDOW_DAYS = 30
CACHE_TTL = timedelta(minutes=5)


class UpcomingCache:
    """A single memoized upcoming list with an expiry window."""

    def __init__(self, ttl: timedelta = CACHE_TTL):
        self.ttl = ttl
        self._lock = threading.Lock()
        self._entry: Optional[Tuple[List[MaintenanceListEntry], datetime]] = None

    def get(self, now: datetime) -> Optional[List[MaintenanceListEntry]]:
        """
        Cached list if it was computed less than ttl before now on the same
        calendar day. Days remaining change at midnight, so a list built
        the day before is never served.
        """
        with self._lock:
            if self._entry is None:
                return None
            entries, computed_at = self._entry
        if start_of_day(computed_at) != start_of_day(now):
            return None
        if computed_at <= now < computed_at + self.ttl:
            return list(entries)
        return None

    def put(self, entries: List[MaintenanceListEntry], now: datetime) -> None:
        with self._lock:
            self._entry = (list(entries), now)

    def clear(self) -> None:
        with self._lock:
            self._entry = None


def build_entry(item: MaintainableItem, now: datetime) -> Optional[MaintenanceListEntry]:
    """List entry for an item, or None when it has no next maintenance date."""
    if not item.next_maintenance_date:
        return None
    due = parse_date(item.next_maintenance_date)
    return MaintenanceListEntry(
        item_id=item.id,
        name=item.name,
        type=item.kind,
        next_maintenance_date=item.next_maintenance_date,
        days_remaining=days_remaining(due, now),
        subtype=item.subtype,
        last_maintenance_date=item.last_maintenance_date,
    )


def find_upcoming(
    items: Iterable[MaintainableItem],
    now: datetime,
    window_days: int = UPCOMING_WINDOW_DAYS,
) -> List[MaintenanceListEntry]:
    """
    Items due within window_days (or overdue), most urgent first.

    Ties keep input order. Items with a malformed stored date are skipped.
    """
    entries = []
    for item in items:
        try:
            entry = build_entry(item, now)
        except InvalidDateFormat as exc:
            logger.warning("Skipping %s %s: %s", item.kind.value, item.id, exc)
            continue
        if entry is not None and entry.days_remaining <= window_days:
            entries.append(entry)
    return sorted(entries, key=lambda e: e.days_remaining)


class UpcomingAggregator:
    """find_upcoming() over consoles and accessories, memoized."""

    def __init__(
        self,
        cache: Optional[UpcomingCache] = None,
        clock: Callable[[], datetime] = datetime.now,
        window_days: int = UPCOMING_WINDOW_DAYS,
    ):
        self.cache = cache if cache is not None else UpcomingCache()
        self.clock = clock
        self.window_days = window_days

    def upcoming(
        self,
        consoles: Iterable[MaintainableItem],
        accessories: Iterable[MaintainableItem],
        now: Optional[datetime] = None,
    ) -> List[MaintenanceListEntry]:
        now = now or self.clock()
        cached = self.cache.get(now)
        if cached is not None:
            logger.debug("Upcoming maintenance served from cache")
            return cached
        entries = find_upcoming([*consoles, *accessories], now, self.window_days)
        self.cache.put(entries, now)
        logger.debug("Upcoming maintenance items found: %d", len(entries))
        return entries

    def clear_cache(self) -> None:
        """Drop the memoized list; call after any maintenance field changes."""
        self.cache.clear()
