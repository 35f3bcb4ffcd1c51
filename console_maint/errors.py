"""Exception types raised by the maintenance engine."""


class MaintenanceError(Exception):
    """Base class for all engine errors."""


class InvalidDateFormat(MaintenanceError, ValueError):
    """A date string matched neither DD/MM/YYYY nor ISO-8601."""

    def __init__(self, text):
        super().__init__(f"Invalid date format: {text!r}")
        self.text = text


class DispatcherError(MaintenanceError):
    """Scheduling, cancelling or listing reminder jobs failed."""


class StorageError(MaintenanceError):
    """Reading or writing persisted data failed."""


class ItemNotFound(MaintenanceError):
    """No console or accessory exists with the given id."""

    def __init__(self, item_id: str):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id


class ConfigError(MaintenanceError):
    """Configuration file or environment value is invalid."""
