from __future__ import annotations

import logging
from typing import Dict, Set

from .combat import CombatResolver
from .constants import Direction
from .dungeon.grid import Coord
from .player.player import EffectKind
from .state import GameState

logger = logging.getLogger(__name__)

AMBIENT_BOSS_MESSAGES = (
    "A low rumble echoes through the corridors. Something ancient stirs.",
    "You feel an unblinking gaze upon you.",
    "The walls tremble as a distant voice whispers your name.",
)

EFFECT_LABELS = {
    EffectKind.REGEN: "regeneration",
    EffectKind.INVINCIBILITY: "invincibility",
}


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class EnemyAI:
    """Externally driven enemy and boss ticks.

    Regular enemies on the player's floor step greedily toward the player when
    within perception range. Moves go into a staging map first and are
    committed at the end of the tick, so iteration order cannot make two
    enemies share a cell.
    """

    def __init__(self, state: GameState, combat: CombatResolver) -> None:
        self.state = state
        self.combat = combat

    @property
    def perception_radius(self) -> int:
        return self.state.player.search_radius + self.state.config.perception_bonus

    # ---- Effects ---------------------------------------------------------
    def tick_effects(self) -> None:
        state = self.state
        healed, expired = state.player.tick_effects()
        if healed:
            state.message(
                f"You regenerate {healed} health. Health: {state.player.health}/{state.player.max_health}"
            )
        for effect in expired:
            state.message(f"The {EFFECT_LABELS.get(effect.kind, effect.kind.value)} effect wears off.")

    # ---- Enemy tick ------------------------------------------------------
    def can_step(self, origin: Coord, dx: int, dy: int) -> bool:
        """Passage check for a greedy step; a diagonal needs both axis flags open."""
        room = self.state.grid.room_at(origin)
        if room is None:
            return False
        if dx and not room.is_open(Direction.EAST if dx > 0 else Direction.WEST):
            return False
        if dy and not room.is_open(Direction.SOUTH if dy > 0 else Direction.NORTH):
            return False
        return True

    def tick(self) -> None:
        state = self.state
        if state.player.is_game_over:
            return
        self.tick_effects()

        floor = state.current_floor
        target_cell = state.player.location
        floor_grid = state.floor_grid()
        staging: Dict[str, Coord] = {eid: coord for coord, eid in state.index.enemies_on_floor(floor)}
        moved: Set[str] = set()
        fought: Set[str] = set()

        for eid, origin in list(staging.items()):
            if state.player.is_game_over:
                break
            enemy = state.enemies.get(eid)
            if enemy is None or enemy.defeated or enemy.is_boss or eid in moved:
                continue
            if origin.manhattan(target_cell) > self.perception_radius:
                continue
            dx = _sign(target_cell.x - origin.x)
            dy = _sign(target_cell.y - origin.y)
            if not dx and not dy:
                continue
            dest = Coord(origin.x + dx, origin.y + dy, floor)
            if not floor_grid.in_bounds(dest.x, dest.y):
                continue
            if self._staged_at(staging, dest, exclude=eid):
                continue
            if not self.can_step(origin, dx, dy):
                continue
            staging[eid] = dest
            moved.add(eid)
            logger.debug("Enemy %s staged %s -> %s", eid, origin, dest)
            if dest == target_cell:
                fought.add(eid)
                self.combat.initiate_combat(eid)

        for eid, coord in staging.items():
            if state.player.is_game_over:
                break
            enemy = state.enemies.get(eid)
            if coord != target_cell or eid in fought or enemy is None or enemy.defeated or enemy.is_boss:
                continue
            fought.add(eid)
            self.combat.initiate_combat(eid)

        self._commit(floor, staging)

    def _staged_at(self, staging: Dict[str, Coord], dest: Coord, exclude: str) -> bool:
        for other, coord in staging.items():
            if other == exclude or coord != dest:
                continue
            enemy = self.state.enemies.get(other)
            if enemy is None or not enemy.defeated:
                return True
        return False

    def _commit(self, floor: int, staging: Dict[str, Coord]) -> None:
        index = self.state.index
        for coord, _ in index.enemies_on_floor(floor):
            del index.enemies[coord]
        for eid, coord in staging.items():
            enemy = self.state.enemies.get(eid)
            if enemy is None or not enemy.defeated:
                index.place_enemy(coord, eid)

    # ---- Boss tick -------------------------------------------------------
    def boss_tick(self) -> None:
        state = self.state
        if state.player.is_game_over or state.current_floor != state.config.final_floor:
            return
        boss = state.enemies.get(state.boss_id) if state.boss_id else None
        if boss is None or boss.defeated:
            return
        if state.index.enemy_location(boss.id) == state.player.location:
            self.combat.initiate_combat(boss.id)
            return
        if state.rng.random() < state.config.boss_ambient_chance:
            state.message(state.rng.choice(AMBIENT_BOSS_MESSAGES))
