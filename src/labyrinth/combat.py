from __future__ import annotations

import logging

from .constants import LABYRINTH_KEY
from .events import SoundCue
from .player.player import EffectKind
from .state import GameState, ResultType

logger = logging.getLogger(__name__)


def compute_damage(attack: int, defense: int) -> int:
    return max(0, attack - defense)


class CombatResolver:
    """Single-exchange melee and the player damage pipeline.

    Every point of damage the player takes flows through ``take_damage`` so a
    death is counted exactly once per zero-crossing.
    """

    def __init__(self, state: GameState) -> None:
        self.state = state

    def take_damage(self, amount: int, cause: str) -> int:
        """Apply damage to the player. Returns health actually lost."""
        state = self.state
        player = state.player
        if player.is_game_over or not player.alive:
            return 0
        if player.has_effect(EffectKind.INVINCIBILITY):
            state.message(f"A shimmering ward absorbs the blow from {cause}!")
            return 0
        lost = player.lose_health(amount)
        if player.health <= 0:
            player.health = 0
            player.cause_of_death = cause
            player.deaths += 1
            state.message(f"You have been defeated by {cause}.")
            state.sound(SoundCue.PLAYER_DEFEATED)
            logger.info("Player died to %s (deaths=%d)", cause, player.deaths)
            state.finish(ResultType.DEFEAT)
        else:
            state.message(f"You take {lost} damage. Health: {player.health}/{player.max_health}")
            state.sound(SoundCue.HIT)
        return lost

    def initiate_combat(self, enemy_id: str) -> bool:
        """Resolve one exchange. Returns True when the enemy was defeated."""
        state = self.state
        if state.player.is_game_over:
            return False
        enemy = state.enemies.get(enemy_id)
        if enemy is None or enemy.defeated:
            logger.debug("Combat with missing or defeated enemy %s ignored", enemy_id)
            return False

        dealt = compute_damage(state.player.attack, enemy.defense)
        enemy.take_hit(dealt)
        state.message(f"You strike the {enemy.name} for {dealt} damage.")
        state.sound(SoundCue.ATTACK)

        if enemy.defeated:
            state.index.remove_enemy(enemy.id)
            state.message(f"You have defeated the {enemy.name}!")
            state.sound(SoundCue.ENEMY_DEFEATED)
            logger.info("Enemy %s defeated", enemy)
            if enemy.is_boss:
                state.player.boss_defeated = True
                state.give_item(state.catalog.by_name(LABYRINTH_KEY))
                state.message(f"The {enemy.name} crumbles, leaving behind the {LABYRINTH_KEY}!")
            return True

        self.take_damage(compute_damage(enemy.attack, state.player.defense), enemy.name)
        return False
