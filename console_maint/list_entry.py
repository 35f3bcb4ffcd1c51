"""MaintenanceListEntry dataclass for the 'due soon' list."""

from dataclasses import dataclass
from typing import Optional

from .item import ItemKind
from .status import Status


@dataclass(frozen=True)
class MaintenanceListEntry:
    """An item whose maintenance is due within the upcoming window."""

    item_id: str
    name: str
    type: ItemKind
    next_maintenance_date: str
    days_remaining: int
    subtype: Optional[str] = None
    last_maintenance_date: Optional[str] = None

    @property
    def status(self) -> Status:
        return Status.classify(self.days_remaining)

    @property
    def is_overdue(self) -> bool:
        return self.days_remaining < 0
