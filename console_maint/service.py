"""MaintenanceService - the entry point the application layer calls."""

import logging
import threading
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .aggregator import UpcomingAggregator
from .calculations import calc_next_due
from .dates import format_date
from .history import NotificationHistory
from .item import MaintainableItem
from .list_entry import MaintenanceListEntry
from .scheduler import ReminderScheduler

logger = logging.getLogger(__name__)

_SCHEDULE_FIELDS = ("last_maintenance_date", "maintenance_interval_months")


class MaintenanceService:
    """
    Ties storage, the upcoming aggregator and the reminder scheduler
    together.

    Every change to an item's maintenance fields:
    - re-derives and persists next_maintenance_date
    - invalidates the upcoming cache
    - reschedules (or cancels) the item's reminders

    Calls for the same item are serialized; different items may run
    concurrently.
    """

    def __init__(
        self,
        store,
        dispatcher,
        history: Optional[NotificationHistory] = None,
        aggregator: Optional[UpcomingAggregator] = None,
        scheduler: Optional[ReminderScheduler] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.dispatcher = dispatcher
        self.history = history if history is not None else NotificationHistory(store)
        self.aggregator = (
            aggregator if aggregator is not None else UpcomingAggregator(clock=clock)
        )
        self.scheduler = (
            scheduler
            if scheduler is not None
            else ReminderScheduler(dispatcher, self.history, clock=clock)
        )
        self.clock = clock
        self._item_locks: Dict[str, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def _lock_for(self, item_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._item_locks[item_id]

    def _sync_reminders(self, item: MaintainableItem, now: Optional[datetime]) -> List[str]:
        if item.notify_maintenance and item.next_maintenance_date:
            return self.scheduler.schedule(item, now)
        self.scheduler.cancel(item.id)
        return []

    def add_item(self, item: MaintainableItem, now: Optional[datetime] = None) -> MaintainableItem:
        """Store a new console or accessory and schedule its reminders."""
        item.next_maintenance_date = calc_next_due(
            item.last_maintenance_date, item.maintenance_interval_months
        )
        self.store.add_item(item)
        self.aggregator.clear_cache()
        with self._lock_for(item.id):
            self._sync_reminders(item, now)
        logger.info("Added %s %r (%s)", item.kind.value, item.name, item.id)
        return item

    def update_item(
        self, item_id: str, now: Optional[datetime] = None, **fields
    ) -> MaintainableItem:
        """
        Update fields on an item.

        When both last maintenance date and interval are present the next
        date is re-derived; when either is missing it is cleared.
        Raises ItemNotFound for an unknown id.
        """
        with self._lock_for(item_id):
            current = self.store.get_item(item_id)
            last = fields.get("last_maintenance_date", current.last_maintenance_date)
            interval = fields.get(
                "maintenance_interval_months", current.maintenance_interval_months
            )
            fields["next_maintenance_date"] = calc_next_due(last, interval)
            item = self.store.update_item(item_id, fields)
            self.aggregator.clear_cache()
            self._sync_reminders(item, now)
        return item

    def complete_maintenance(
        self, item_id: str, when: Optional[datetime] = None, now: Optional[datetime] = None
    ) -> MaintainableItem:
        """Record maintenance as done (default: today) and roll the schedule forward."""
        when = when or now or self.clock()
        item = self.update_item(item_id, now=now, last_maintenance_date=format_date(when))
        logger.info(
            "Maintenance completed for %r; next due %s",
            item.name,
            item.next_maintenance_date or "-",
        )
        return item

    def delete_item(self, item_id: str) -> MaintainableItem:
        """Remove an item and cancel its reminders."""
        with self._lock_for(item_id):
            removed = self.store.delete_item(item_id)
            self.aggregator.clear_cache()
            self.scheduler.cancel(item_id)
        # Lock entries outlive the item: waiters and later callers share one lock.
        return removed

    def upcoming(self, now: Optional[datetime] = None) -> List[MaintenanceListEntry]:
        """Items due within the upcoming window or overdue, most urgent first."""
        return self.aggregator.upcoming(
            self.store.get_consoles(), self.store.get_accessories(), now
        )

    def schedule_item(self, item_id: str, now: Optional[datetime] = None) -> List[str]:
        """Re-run the reminder ladder for one stored item."""
        with self._lock_for(item_id):
            return self._sync_reminders(self.store.get_item(item_id), now)

    def reschedule_all(self, now: Optional[datetime] = None) -> Dict[str, List[str]]:
        """Re-run the reminder ladder for every stored item."""
        results = {}
        for item in self.store.get_items():
            with self._lock_for(item.id):
                results[item.id] = self._sync_reminders(item, now)
        return results
