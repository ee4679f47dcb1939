from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnemyTemplate:
    name: str
    description: str
    health: int
    attack: int
    defense: int


@dataclass
class Enemy:
    """A placed enemy. Health only drops through the combat resolver."""

    id: str
    name: str
    description: str
    health: int
    max_health: int
    attack: int
    defense: int
    speed: int
    floor: int
    is_boss: bool = False
    defeated: bool = False

    @property
    def alive(self) -> bool:
        return not self.defeated

    def take_hit(self, amount: int) -> int:
        """Apply damage; marks the enemy defeated at zero. Returns damage dealt."""
        amount = max(0, int(amount))
        before = self.health
        self.health = max(0, self.health - amount)
        if self.health == 0 and not self.defeated:
            self.defeated = True
            logger.debug("%r defeated", self)
        return before - self.health

    @classmethod
    def spawn(cls, enemy_id: str, template: EnemyTemplate, floor: int, speed: int) -> "Enemy":
        return cls(
            id=enemy_id,
            name=template.name,
            description=template.description,
            health=template.health,
            max_health=template.health,
            attack=template.attack,
            defense=template.defense,
            speed=speed,
            floor=floor,
        )

    def __repr__(self) -> str:
        return f"Enemy({self.name}#{self.id} hp={self.health}/{self.max_health} floor={self.floor})"
