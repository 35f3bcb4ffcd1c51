"""NotificationRecord class for the reminder history log."""

from datetime import datetime
from typing import Any, Dict, Optional


class NotificationRecord:
    """A reminder that was scheduled, as kept in the history log."""

    def __init__(
            self,
            id: str,
            title: str,
            body: str,
            created_at: str,
            item_id: Optional[str] = None,
            item_type: Optional[str] = None,
            maintenance_date: Optional[str] = None,
            read: bool = False,
    ):
        self.id = id
        self.title = title
        self.body = body
        self.created_at = created_at
        self.item_id = item_id
        self.item_type = item_type
        self.maintenance_date = maintenance_date
        self.read = read

    @classmethod
    def create(
            cls,
            id: str,
            title: str,
            body: str,
            item_id: str,
            item_type: str,
            maintenance_date: str,
            now: Optional[datetime] = None,
    ) -> "NotificationRecord":
        """Build an unread record stamped with the time it was written."""
        created = (now or datetime.now()).isoformat(timespec="seconds")
        return cls(id, title, body, created, item_id, item_type, maintenance_date)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the persisted format (camelCase keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "createdAt": self.created_at,
            "read": self.read,
            "itemId": self.item_id,
            "itemType": self.item_type,
            "maintenanceDate": self.maintenance_date,
        }

    @classmethod
    def from_dict(cls, dct: Dict[str, Any]) -> "NotificationRecord":
        return cls(
            dct["id"],
            dct["title"],
            dct["body"],
            dct["createdAt"],
            dct.get("itemId"),
            dct.get("itemType"),
            dct.get("maintenanceDate"),
            bool(dct.get("read", False)),
        )
