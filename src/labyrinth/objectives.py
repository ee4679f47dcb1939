from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from .constants import ARTISAN_TOOLS, LABYRINTH_KEY
from .state import GameState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Objective:
    floor: int
    title: str
    description: str
    steps: List[str] = field(default_factory=list)
    completed: bool = False


def evaluate(state: GameState) -> Objective:
    """Current floor's goal, recomputed from live state on every call."""
    objective = _objective_for(state)
    logger.debug("Objective on floor %d: %s (completed=%s)", objective.floor, objective.title, objective.completed)
    return objective


def _objective_for(state: GameState) -> Objective:
    floor = state.current_floor
    final = state.config.final_floor
    room = state.current_room()

    if floor == final:
        return Objective(
            floor=floor,
            title="Escape the Labyrinth",
            description="Defeat the Watcher of the Core and claim the Labyrinth Key.",
            steps=["Find and defeat the boss", f"Obtain the {LABYRINTH_KEY}", "Unlock the exit"],
            completed=state.player.boss_defeated and state.has_item(LABYRINTH_KEY),
        )
    if floor == 0:
        return Objective(
            floor=floor,
            title="Find the Way Down",
            description="Explore the first floor and find the stairs leading deeper.",
            steps=["Explore the maze", "Reach the stairs down"],
            completed=room.has_stairs_down,
        )
    if floor == 1:
        return Objective(
            floor=floor,
            title="The Artisan's Legacy",
            description=f"Recover the {ARTISAN_TOOLS} and find the stairs down.",
            steps=[f"Find the {ARTISAN_TOOLS}", "Reach the stairs down"],
            completed=room.has_stairs_down and state.has_item(ARTISAN_TOOLS),
        )
    return Objective(
        floor=floor,
        title="Survive",
        description="Survive the depths of the Labyrinth.",
        steps=["Stay alive"],
        completed=False,
    )
