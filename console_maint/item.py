"""Console and accessory classes - the items that receive maintenance."""

from enum import Enum
from typing import Optional


class ItemKind(Enum):
    """Kinds of maintainable items."""

    CONSOLE = "console"
    ACCESSORY = "accessory"


class MaintainableItem:
    """Common maintenance fields shared by consoles and accessories."""

    kind: ItemKind

    def __init__(
            self,
            name: str,
            id: Optional[str] = None,
            purchase_date: Optional[str] = None,
            last_maintenance_date: Optional[str] = None,
            maintenance_interval_months: Optional[int] = None,
            next_maintenance_date: Optional[str] = None,
            maintenance_description: Optional[str] = None,
            notify_maintenance: bool = True,
    ):
        self.id = id
        self.name = name
        self.purchase_date = purchase_date
        self.last_maintenance_date = last_maintenance_date
        self.maintenance_interval_months = maintenance_interval_months
        self.next_maintenance_date = next_maintenance_date
        self.maintenance_description = maintenance_description
        self.notify_maintenance = notify_maintenance

    @property
    def has_schedule(self) -> bool:
        """True when a recurring maintenance interval is configured."""
        return bool(self.last_maintenance_date and self.maintenance_interval_months)

    @property
    def subtype(self) -> Optional[str]:
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id} {self.name!r}>"


class Console(MaintainableItem):
    """A game console in the collection."""

    kind = ItemKind.CONSOLE

    def __init__(
            self,
            name: str,
            brand: Optional[str] = None,
            model: Optional[str] = None,
            region: Optional[str] = None,
            **kwargs,
    ):
        super().__init__(name, **kwargs)
        self.brand = brand
        self.model = model
        self.region = region


class Accessory(MaintainableItem):
    """A controller, cable, dock or other accessory."""

    kind = ItemKind.ACCESSORY

    def __init__(
            self,
            name: str,
            subtype: Optional[str] = None,
            console_id: Optional[str] = None,
            **kwargs,
    ):
        super().__init__(name, **kwargs)
        self._subtype = subtype
        self.console_id = console_id

    @property
    def subtype(self) -> Optional[str]:
        """Free-text accessory type (e.g. 'controller')."""
        return self._subtype

    @subtype.setter
    def subtype(self, value: Optional[str]) -> None:
        self._subtype = value
