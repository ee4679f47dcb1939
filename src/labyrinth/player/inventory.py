from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..items.models import EquipmentSlot, Item

logger = logging.getLogger(__name__)


@dataclass
class InventoryEntry:
    item: Item
    quantity: int = 1
    is_equipped: bool = False


class Inventory:
    """
    Inventory keyed by item id, with quantities and equipped items per slot.

    - Stackable items accumulate quantity; a non-stackable duplicate is absorbed
      into the existing entry without changing its quantity.
    - Equipping never consumes quantity; it only flips the entry's flag and the
      slot mapping. Equipping into an occupied slot displaces the occupant.
    """

    def __init__(self) -> None:
        self._items: Dict[str, InventoryEntry] = {}
        self._equipped: Dict[EquipmentSlot, Optional[str]] = {slot: None for slot in EquipmentSlot}

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items

    def __len__(self) -> int:
        return len(self._items)

    def add_item(self, item: Item, qty: int = 1) -> InventoryEntry:
        entry = self._items.get(item.id)
        added = max(1, qty)
        if entry is None:
            entry = InventoryEntry(item=item.copy(), quantity=added)
            self._items[item.id] = entry
        elif item.stackable:
            entry.quantity += added
        else:
            added = 0
        logger.debug("Added %d x %s (total=%d)", added, item.id, entry.quantity)
        return entry

    def get(self, item_id: str) -> Optional[InventoryEntry]:
        return self._items.get(item_id)

    def get_quantity(self, item_id: str) -> int:
        entry = self._items.get(item_id)
        return entry.quantity if entry else 0

    def find_by_name(self, name: str) -> Optional[InventoryEntry]:
        for entry in self._items.values():
            if entry.item.name == name:
                return entry
        return None

    def has_item_named(self, name: str) -> bool:
        return self.find_by_name(name) is not None

    def entries(self) -> List[InventoryEntry]:
        return list(self._items.values())

    def remove_one(self, item_id: str) -> bool:
        """Drop one unit; the entry disappears at zero and leaves its slot."""
        entry = self._items.get(item_id)
        if entry is None:
            return False
        entry.quantity -= 1
        if entry.quantity <= 0:
            if entry.is_equipped:
                self.unequip(item_id)
            del self._items[item_id]
            logger.debug("Removed last %s from inventory", item_id)
        else:
            logger.debug("Removed one %s; remaining=%d", item_id, entry.quantity)
        return True

    # ---- Equipment -------------------------------------------------------
    def equipped(self) -> Dict[EquipmentSlot, Optional[str]]:
        return dict(self._equipped)

    def equipped_item(self, slot: EquipmentSlot) -> Optional[Item]:
        item_id = self._equipped.get(slot)
        if item_id is None:
            return None
        return self._items[item_id].item

    def equip(self, item_id: str) -> Optional[str]:
        """
        Equip the given item into its slot.

        Returns the previously equipped item id in that slot (if any).
        Raises ValueError for items that are missing or not equipment.
        """
        entry = self._items.get(item_id)
        if not entry:
            raise ValueError(f"Item not in inventory: {item_id}")
        slot = entry.item.equipment_slot
        if slot is None:
            raise ValueError(f"Cannot equip non-equipment item: {item_id}")

        previous_id = self._equipped.get(slot)
        if previous_id and previous_id != item_id:
            self._items[previous_id].is_equipped = False
            logger.debug("Unequipped %s from %s", previous_id, slot.value)

        self._equipped[slot] = item_id
        entry.is_equipped = True
        logger.debug("Equipped %s to %s", item_id, slot.value)
        return previous_id if previous_id != item_id else None

    def unequip(self, item_id: str) -> Optional[EquipmentSlot]:
        """Clear whichever slot holds item_id. Returns that slot, if any."""
        entry = self._items.get(item_id)
        if entry is None:
            return None
        entry.is_equipped = False
        for slot, current in self._equipped.items():
            if current == item_id:
                self._equipped[slot] = None
                logger.debug("Unequipped %s from %s", item_id, slot.value)
                return slot
        return None
