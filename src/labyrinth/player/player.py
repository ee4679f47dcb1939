from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from ..dungeon.grid import Coord
from ..items.models import EquipmentSlot
from .inventory import Inventory

logger = logging.getLogger(__name__)


class EffectKind(str, Enum):
    REGEN = "regen_health"
    INVINCIBILITY = "invincibility"


@dataclass
class ActiveEffect:
    kind: EffectKind
    remaining_ticks: int
    magnitude: int = 0


@dataclass
class Player:
    """Singleton player of one labyrinth session.

    Attack and defense are derived from base values and equipment on every
    read; nothing caches them.
    """

    location: Coord
    max_health: int
    base_attack: int
    base_defense: int
    search_radius: int
    max_search_radius: int
    health: int = -1
    deaths: int = 0
    inventory: Inventory = field(default_factory=Inventory)
    is_game_over: bool = False
    cause_of_death: Optional[str] = None
    boss_defeated: bool = False
    effects: List[ActiveEffect] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.health < 0:
            self.health = self.max_health

    # ---- Derived stats ---------------------------------------------------
    def _bonus(self, slot: EquipmentSlot, effect: str) -> int:
        item = self.inventory.equipped_item(slot)
        if item is None or item.effect != effect:
            return 0
        return int(item.value or 0)

    @property
    def attack(self) -> int:
        return (
            self.base_attack
            + self._bonus(EquipmentSlot.WEAPON, "attack_boost")
            + self._bonus(EquipmentSlot.AMULET, "all_boost")
        )

    @property
    def defense(self) -> int:
        return (
            self.base_defense
            + self._bonus(EquipmentSlot.SHIELD, "defense_boost")
            + self._bonus(EquipmentSlot.AMULET, "all_boost")
        )

    @property
    def alive(self) -> bool:
        return self.health > 0

    # ---- Health ----------------------------------------------------------
    def heal(self, amount: int) -> int:
        """Raise health by amount, never above max. Returns the amount healed."""
        before = self.health
        self.health = min(self.max_health, self.health + max(0, int(amount)))
        return self.health - before

    def lose_health(self, amount: int) -> int:
        before = self.health
        self.health = max(0, self.health - max(0, int(amount)))
        return before - self.health

    def increase_search_radius(self) -> bool:
        if self.search_radius >= self.max_search_radius:
            return False
        self.search_radius += 1
        return True

    # ---- Timed effects ---------------------------------------------------
    def has_effect(self, kind: EffectKind) -> bool:
        return any(e.kind == kind and e.remaining_ticks > 0 for e in self.effects)

    def add_effect(self, kind: EffectKind, ticks: int, magnitude: int = 0) -> ActiveEffect:
        # Reapplying refreshes rather than stacking
        for effect in self.effects:
            if effect.kind == kind:
                effect.remaining_ticks = max(effect.remaining_ticks, ticks)
                effect.magnitude = max(effect.magnitude, magnitude)
                return effect
        effect = ActiveEffect(kind=kind, remaining_ticks=ticks, magnitude=magnitude)
        self.effects.append(effect)
        logger.debug("Effect %s applied for %d ticks", kind.value, ticks)
        return effect

    def tick_effects(self) -> Tuple[int, List[ActiveEffect]]:
        """Advance every effect one tick.

        Returns the health regenerated this tick and the effects that expired.
        """
        healed = 0
        for effect in self.effects:
            if effect.kind == EffectKind.REGEN:
                healed += self.heal(effect.magnitude)
            effect.remaining_ticks -= 1
        expired = [e for e in self.effects if e.remaining_ticks <= 0]
        self.effects = [e for e in self.effects if e.remaining_ticks > 0]
        return healed, expired

    def revive(self) -> None:
        self.health = self.max_health
        self.is_game_over = False
        self.cause_of_death = None
        self.effects.clear()
