from .inventory import Inventory, InventoryEntry
from .player import ActiveEffect, EffectKind, Player

__all__ = ["ActiveEffect", "EffectKind", "Inventory", "InventoryEntry", "Player"]
