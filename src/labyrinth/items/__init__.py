from .catalog import Catalog
from .models import AccessorySlot, EquipmentSlot, Item, ItemType, StaticKind

__all__ = ["AccessorySlot", "Catalog", "EquipmentSlot", "Item", "ItemType", "StaticKind"]
