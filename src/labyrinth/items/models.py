from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ItemType(str, Enum):
    CONSUMABLE = "consumable"
    WEAPON = "weapon"
    SHIELD = "shield"
    ACCESSORY = "accessory"
    KEY = "key"
    OBJECTIVE = "objective"
    STATIC = "static"


class AccessorySlot(str, Enum):
    AMULET = "amulet"
    COMPASS = "compass"


class EquipmentSlot(str, Enum):
    WEAPON = "weapon"
    SHIELD = "shield"
    AMULET = "amulet"
    COMPASS = "compass"


class StaticKind(str, Enum):
    """Fixture behaviours, one handler per kind in the action resolver."""

    ANCIENT_MECHANISM = "ancient_mechanism"
    WHISPERING_WELL = "whispering_well"
    HIDDEN_SPRING = "hidden_spring"
    MYSTERIOUS_BOX = "mysterious_box"
    ANCIENT_ALTAR = "ancient_altar"
    MYSTERIOUS_STAIRCASE = "mysterious_staircase"
    GRAND_RIDDLE = "grand_riddle"
    TRIGGERED_TRAP = "triggered_trap"
    REPAIR_BENCH = "repair_bench"
    UNKNOWN = "unknown"


# Item types picked up silently when the player walks onto them
AUTO_PICKUP_TYPES = frozenset({ItemType.KEY, ItemType.OBJECTIVE})


@dataclass(frozen=True)
class Item:
    """Immutable item template.

    Inventory entries hold their own copy so equip state never leaks back
    into the catalog.
    """

    id: str
    name: str
    description: str
    type: ItemType
    effect: Optional[str] = None
    value: Optional[int] = None
    duration: Optional[int] = None
    stackable: bool = False
    is_static: bool = False
    static_kind: Optional[StaticKind] = None
    accessory_slot: Optional[AccessorySlot] = None
    requires: Optional[str] = None

    @classmethod
    def from_dict(cls, item_id: str, data: Dict[str, Any]) -> "Item":
        """Build a template from a catalog entry already validated by the schema."""
        item_type = ItemType(data["type"])
        static_kind = None
        if item_type == ItemType.STATIC:
            static_kind = StaticKind(data.get("kind", StaticKind.UNKNOWN.value))
        slot = data.get("slot")
        return cls(
            id=item_id,
            name=data["name"],
            description=data.get("description", ""),
            type=item_type,
            effect=data.get("effect"),
            value=data.get("value"),
            duration=data.get("duration"),
            stackable=bool(data.get("stackable", False)),
            is_static=item_type == ItemType.STATIC,
            static_kind=static_kind,
            accessory_slot=AccessorySlot(slot) if slot else None,
            requires=data.get("requires"),
        )

    @property
    def equipment_slot(self) -> Optional[EquipmentSlot]:
        if self.type == ItemType.WEAPON:
            return EquipmentSlot.WEAPON
        if self.type == ItemType.SHIELD:
            return EquipmentSlot.SHIELD
        if self.type == ItemType.ACCESSORY:
            if self.accessory_slot == AccessorySlot.COMPASS:
                return EquipmentSlot.COMPASS
            return EquipmentSlot.AMULET
        return None

    def is_equipment(self) -> bool:
        return self.equipment_slot is not None

    def is_consumable(self) -> bool:
        return self.type == ItemType.CONSUMABLE

    def copy(self) -> "Item":
        return dataclasses.replace(self)


__all__ = [
    "AUTO_PICKUP_TYPES",
    "AccessorySlot",
    "EquipmentSlot",
    "Item",
    "ItemType",
    "StaticKind",
]
