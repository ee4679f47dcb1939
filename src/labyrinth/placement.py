from __future__ import annotations

import logging
import random
from typing import Dict, Iterator, List, Optional, Set, Tuple

from .dungeon.grid import Coord, Decoration, FloorGrid, Room

logger = logging.getLogger(__name__)


class PlacementIndex:
    """Coordinate-keyed occupancy maps for one labyrinth.

    Three single-occupancy maps (items, static items, enemies) are independent
    of each other, so one cell may hold an enemy, an item and a static item at
    the same time. Decorations are cosmetic and never block placement. The
    revealed set tracks static items uncovered by searching.
    """

    def __init__(self) -> None:
        self.items: Dict[Coord, str] = {}
        self.static_items: Dict[Coord, str] = {}
        self.enemies: Dict[Coord, str] = {}
        self.decorations: Dict[Coord, Decoration] = {}
        self.revealed: Set[Coord] = set()

    # ---- Occupancy -------------------------------------------------------
    def is_occupied(self, coord: Coord) -> bool:
        return coord in self.items or coord in self.static_items or coord in self.enemies

    def place_item(self, coord: Coord, item_id: str) -> bool:
        return self._place(self.items, coord, item_id, "item")

    def place_static(self, coord: Coord, item_id: str) -> bool:
        return self._place(self.static_items, coord, item_id, "static item")

    def place_enemy(self, coord: Coord, enemy_id: str) -> bool:
        return self._place(self.enemies, coord, enemy_id, "enemy")

    @staticmethod
    def _place(mapping: Dict[Coord, str], coord: Coord, entity_id: str, kind: str) -> bool:
        if coord in mapping:
            logger.error("Refusing to stack %s %s on %s (holds %s)", kind, entity_id, coord, mapping[coord])
            return False
        mapping[coord] = entity_id
        return True

    # ---- Removal ---------------------------------------------------------
    def take_item(self, coord: Coord) -> Optional[str]:
        return self.items.pop(coord, None)

    def remove_static(self, coord: Coord) -> Optional[str]:
        self.revealed.discard(coord)
        return self.static_items.pop(coord, None)

    def remove_enemy(self, enemy_id: str) -> Optional[Coord]:
        coord = self.enemy_location(enemy_id)
        if coord is not None:
            del self.enemies[coord]
        return coord

    # ---- Query -----------------------------------------------------------
    def enemy_location(self, enemy_id: str) -> Optional[Coord]:
        for coord, eid in self.enemies.items():
            if eid == enemy_id:
                return coord
        return None

    def enemies_on_floor(self, floor: int) -> List[Tuple[Coord, str]]:
        return [(c, eid) for c, eid in self.enemies.items() if c.floor == floor]

    def is_revealed(self, coord: Coord) -> bool:
        return coord in self.revealed and coord in self.static_items

    def reveal(self, coord: Coord) -> bool:
        """Mark a static item visible. Returns True if it was hidden before."""
        if coord not in self.static_items or coord in self.revealed:
            return False
        self.revealed.add(coord)
        return True

    def iter_floor(self, floor: int) -> Iterator[Coord]:
        for mapping in (self.items, self.static_items, self.enemies):
            for coord in mapping:
                if coord.floor == floor:
                    yield coord


def random_unoccupied_room(
    rng: random.Random, grid: FloorGrid, index: Optional[PlacementIndex] = None
) -> Optional[Room]:
    """Pick a random room with no marker flags and no occupant in any map.

    Returns None when the floor is exhausted; callers skip the placement.
    """
    candidates = [
        r for r in grid.rooms() if not r.has_marker() and (index is None or not index.is_occupied(r.coord))
    ]
    if not candidates:
        return None
    return rng.choice(candidates)
