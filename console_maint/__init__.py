"""
Console collection maintenance engine.

This package computes when consoles and accessories next need
maintenance and keeps reminders for them scheduled:
- dates: DD/MM/YYYY and ISO-8601 parsing/formatting
- calculations: next due date from last maintenance + interval
- Status: Urgency levels (OVERDUE, URGENT, ATTENTION, OK)
- UpcomingAggregator: 'due soon' list with a short-lived cache
- ReminderScheduler: the 30/14/7/3/1/0-day reminder ladder
- NotificationHistory: capped log of scheduled reminders
- MaintenanceService: main entry point combining all of the above
"""

from .errors import (
    MaintenanceError,
    InvalidDateFormat,
    DispatcherError,
    StorageError,
    ItemNotFound,
    ConfigError,
)
from .status import Status
from .item import ItemKind, MaintainableItem, Console, Accessory
from .list_entry import MaintenanceListEntry
from .notification_record import NotificationRecord
from .dates import parse_date, format_date, start_of_day, days_remaining
from .calculations import calc_next_due, check_interval
from .aggregator import UpcomingCache, UpcomingAggregator, find_upcoming
from .dispatcher import Dispatcher, ScheduledJob, YamlDispatcher
from .history import NotificationHistory
from .scheduler import ReminderScheduler, REMINDER_TIERS
from .storage import CollectionStore
from .service import MaintenanceService
from .config import Settings, load_settings

__all__ = [
    "MaintenanceError",
    "InvalidDateFormat",
    "DispatcherError",
    "StorageError",
    "ItemNotFound",
    "ConfigError",
    "Status",
    "ItemKind",
    "MaintainableItem",
    "Console",
    "Accessory",
    "MaintenanceListEntry",
    "NotificationRecord",
    "parse_date",
    "format_date",
    "start_of_day",
    "days_remaining",
    "calc_next_due",
    "check_interval",
    "UpcomingCache",
    "UpcomingAggregator",
    "find_upcoming",
    "Dispatcher",
    "ScheduledJob",
    "YamlDispatcher",
    "NotificationHistory",
    "ReminderScheduler",
    "REMINDER_TIERS",
    "CollectionStore",
    "MaintenanceService",
    "Settings",
    "load_settings",
]
