"""
Reminder ladder scheduling.

For one item: cancel whatever reminders it already has, then schedule a
reminder at 09:00 on each ladder tier (days before the due date) that is
still in the future. Items already overdue also get a single overdue
reminder for the next morning.
"""

import logging
from datetime import datetime, time, timedelta
from typing import Callable, List, NamedTuple, Optional

from .dates import days_remaining, parse_date, start_of_day
from .errors import DispatcherError
from .history import NotificationHistory
from .item import MaintainableItem
from .notification_record import NotificationRecord

logger = logging.getLogger(__name__)

REMINDER_TIERS = (30, 14, 7, 3, 1, 0)
REMINDER_HOUR = 9


class ReminderText(NamedTuple):
    kind: str
    title: str
    body: str


def tier_text(tier: int, name: str) -> ReminderText:
    """Title and body for a ladder tier; longer lead times read softer."""
    if tier >= 7:
        return ReminderText(
            "maintenance_reminder",
            "Maintenance reminder",
            f"Maintenance for {name} is scheduled in {tier} days.",
        )
    if tier > 1:
        return ReminderText(
            "maintenance_upcoming",
            "Maintenance coming up",
            f"Maintenance for {name} is coming up in {tier} days.",
        )
    if tier == 1:
        return ReminderText(
            "maintenance_tomorrow",
            "Maintenance tomorrow",
            f"Maintenance for {name} is due tomorrow.",
        )
    return ReminderText(
        "maintenance_due",
        "Maintenance today",
        f"Today is the scheduled maintenance day for {name}.",
    )


def overdue_text(days_overdue: int, name: str) -> ReminderText:
    unit = "day" if days_overdue == 1 else "days"
    return ReminderText(
        "maintenance_overdue",
        "Maintenance overdue",
        f"Maintenance for {name} is {days_overdue} {unit} overdue.",
    )


def at_hour(day: datetime, hour: int) -> datetime:
    return datetime.combine(day.date(), time(hour=hour))


class ReminderScheduler:
    """Keeps an item's dispatcher jobs in step with its next maintenance date."""

    def __init__(
        self,
        dispatcher,
        history: NotificationHistory,
        reminder_hour: int = REMINDER_HOUR,
        tiers=REMINDER_TIERS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.dispatcher = dispatcher
        self.history = history
        self.reminder_hour = reminder_hour
        self.tiers = tuple(tiers)
        self.clock = clock

    def cancel(self, item_id: str) -> int:
        """Cancel all pending reminders for an item."""
        try:
            cancelled = self.dispatcher.cancel_for_item(item_id)
        except DispatcherError:
            logger.error("Failed to cancel reminders for item %s", item_id)
            raise
        if cancelled:
            logger.debug("Cancelled %d reminder(s) for item %s", cancelled, item_id)
        return cancelled

    def schedule(self, item: MaintainableItem, now: Optional[datetime] = None) -> List[str]:
        """
        Replace the item's reminders with a fresh ladder.

        Returns the ids of the jobs created, in firing order. A dispatcher
        failure stops the run and propagates; the whole call can be retried
        because it always starts by cancelling.
        """
        now = now or self.clock()
        self.cancel(item.id)

        if not item.next_maintenance_date:
            return []

        due = parse_date(item.next_maintenance_date)
        diff_days = days_remaining(due, now)
        logger.info(
            "Scheduling reminders for %s (%s): maintenance in %d day(s)",
            item.name,
            item.kind.value,
            diff_days,
        )

        job_ids = []
        for tier in self.tiers:
            if diff_days < tier:
                continue
            fires_at = at_hour(start_of_day(due) - timedelta(days=tier), self.reminder_hour)
            if fires_at <= now:
                continue
            job_ids.append(self._submit(item, tier_text(tier, item.name), fires_at, now, tier))

        if diff_days < 0:
            fires_at = at_hour(now + timedelta(days=1), self.reminder_hour)
            text = overdue_text(abs(diff_days), item.name)
            job_ids.append(self._submit(item, text, fires_at, now, None))

        return job_ids

    def _submit(
        self,
        item: MaintainableItem,
        text: ReminderText,
        fires_at: datetime,
        now: datetime,
        tier: Optional[int],
    ) -> str:
        payload = {
            "itemId": item.id,
            "itemType": item.kind.value,
            "maintenanceDate": item.next_maintenance_date,
            "type": text.kind,
            "tier": tier,
            "title": text.title,
            "body": text.body,
        }
        try:
            job_id = self.dispatcher.schedule(payload, fires_at)
        except DispatcherError:
            logger.error("Failed to schedule %s for item %s", text.kind, item.id)
            raise
        logger.debug("Reminder %s scheduled for %s", job_id, fires_at.isoformat())

        self.history.append(
            NotificationRecord.create(
                job_id,
                text.title,
                text.body,
                item.id,
                item.kind.value,
                item.next_maintenance_date,
                now=now,
            )
        )
        return job_id
