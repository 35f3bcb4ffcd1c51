"""YAML loading and saving utilities for the console collection."""

import logging
import threading
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ItemNotFound, StorageError
from .item import Accessory, Console, ItemKind, MaintainableItem

logger = logging.getLogger(__name__)

_SECTIONS = {ItemKind.CONSOLE: "consoles", ItemKind.ACCESSORY: "accessories"}


def _common_to_dict(item: MaintainableItem) -> Dict[str, Any]:
    d: Dict[str, Any] = {"id": item.id, "name": item.name}
    if item.purchase_date is not None:
        d["purchaseDate"] = item.purchase_date
    if item.last_maintenance_date is not None:
        d["lastMaintenanceDate"] = item.last_maintenance_date
    if item.maintenance_interval_months is not None:
        d["maintenanceIntervalMonths"] = item.maintenance_interval_months
    if item.next_maintenance_date is not None:
        d["nextMaintenanceDate"] = item.next_maintenance_date
    if item.maintenance_description is not None:
        d["maintenanceDescription"] = item.maintenance_description
    if not item.notify_maintenance:
        d["notifyMaintenance"] = False
    return d


def _item_to_dict(item: MaintainableItem) -> Dict[str, Any]:
    """Serialize a Console or Accessory to the YAML dict format (camelCase keys)."""
    d = _common_to_dict(item)
    if isinstance(item, Console):
        for key, value in (("brand", item.brand), ("model", item.model), ("region", item.region)):
            if value is not None:
                d[key] = value
    elif isinstance(item, Accessory):
        if item.subtype is not None:
            d["type"] = item.subtype
        if item.console_id is not None:
            d["consoleId"] = item.console_id
    return d


def _common_kwargs(dct: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": dct.get("id"),
        "purchase_date": dct.get("purchaseDate"),
        "last_maintenance_date": dct.get("lastMaintenanceDate"),
        "maintenance_interval_months": dct.get("maintenanceIntervalMonths"),
        "next_maintenance_date": dct.get("nextMaintenanceDate"),
        "maintenance_description": dct.get("maintenanceDescription"),
        "notify_maintenance": dct.get("notifyMaintenance", True),
    }


def _parse_item(kind: ItemKind, dct: Dict[str, Any]) -> MaintainableItem:
    """Parse dictionary into the appropriate item type."""
    if kind is ItemKind.CONSOLE:
        return Console(
            dct["name"],
            dct.get("brand"),
            dct.get("model"),
            dct.get("region"),
            **_common_kwargs(dct),
        )
    return Accessory(
        dct["name"],
        dct.get("type"),
        dct.get("consoleId"),
        **_common_kwargs(dct),
    )


def generate_id() -> str:
    """Unique, stable item id."""
    return uuid.uuid4().hex


class CollectionStore:
    """
    Console/accessory records and a small key/value section kept in one
    YAML file.

    Every write loads the raw YAML, modifies it and writes the whole file
    back. A missing file reads as an empty collection.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Raw file access
    # -------------------------------------------------------------------------

    def _load_raw(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"consoles": [], "accessories": [], "store": {}}
        try:
            with open(self.path, "r") as fp:
                data = yaml.load(fp, Loader=yaml.SafeLoader) or {}
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to read %s: %s", self.path, exc)
            raise StorageError(f"Failed to read {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"{self.path} does not contain a collection mapping")
        for section in ("consoles", "accessories"):
            if data.get(section) is None:
                data[section] = []
        if data.get("store") is None:
            data["store"] = {}
        return data

    def _dump_raw(self, data: Dict[str, Any]) -> None:
        try:
            with open(self.path, "w") as fp:
                yaml.dump(
                    data,
                    fp,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                    width=120,
                )
        except (OSError, yaml.YAMLError) as exc:
            logger.error("Failed to write %s: %s", self.path, exc)
            raise StorageError(f"Failed to write {self.path}: {exc}") from exc

    # -------------------------------------------------------------------------
    # Items
    # -------------------------------------------------------------------------

    def get_consoles(self) -> List[Console]:
        data = self._load_raw()
        return [_parse_item(ItemKind.CONSOLE, d) for d in data["consoles"]]

    def get_accessories(self) -> List[Accessory]:
        data = self._load_raw()
        return [_parse_item(ItemKind.ACCESSORY, d) for d in data["accessories"]]

    def get_items(self) -> List[MaintainableItem]:
        """All consoles followed by all accessories."""
        return [*self.get_consoles(), *self.get_accessories()]

    def get_item(self, item_id: str) -> MaintainableItem:
        for item in self.get_items():
            if item.id == item_id:
                return item
        raise ItemNotFound(item_id)

    def _find(self, data: Dict[str, Any], item_id: str):
        for kind, section in _SECTIONS.items():
            for index, dct in enumerate(data[section]):
                if dct.get("id") == item_id:
                    return kind, section, index
        raise ItemNotFound(item_id)

    def add_item(self, item: MaintainableItem) -> MaintainableItem:
        """Append an item, assigning it an id when it has none."""
        with self._lock:
            data = self._load_raw()
            if item.id is None:
                item.id = generate_id()
            data[_SECTIONS[item.kind]].append(_item_to_dict(item))
            self._dump_raw(data)
        logger.debug("Added %s %s", item.kind.value, item.id)
        return item

    def update_item(self, item_id: str, fields: Dict[str, Any]) -> MaintainableItem:
        """
        Set attributes on a stored item and write it back.

        Field names are the item's Python attribute names.
        """
        with self._lock:
            data = self._load_raw()
            kind, section, index = self._find(data, item_id)
            item = _parse_item(kind, data[section][index])
            for name, value in fields.items():
                if name in ("id", "kind") or not hasattr(item, name):
                    raise ValueError(f"Unknown {kind.value} field: {name}")
                try:
                    setattr(item, name, value)
                except AttributeError as exc:  # read-only property
                    raise ValueError(f"Unknown {kind.value} field: {name}") from exc
            data[section][index] = _item_to_dict(item)
            self._dump_raw(data)
        logger.debug("Updated %s %s: %s", kind.value, item_id, sorted(fields))
        return item

    def delete_item(self, item_id: str) -> MaintainableItem:
        """Remove an item and return what was removed."""
        with self._lock:
            data = self._load_raw()
            kind, section, index = self._find(data, item_id)
            removed = _parse_item(kind, data[section].pop(index))
            self._dump_raw(data)
        logger.debug("Deleted %s %s", kind.value, item_id)
        return removed

    # -------------------------------------------------------------------------
    # Key/value section
    # -------------------------------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        return self._load_raw()["store"].get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            data = self._load_raw()
            data["store"][key] = value
            self._dump_raw(data)
