from __future__ import annotations

from enum import Enum
from typing import Dict, Tuple, Union

# Names of the notable templates the rules refer to
LABYRINTH_KEY = "Labyrinth Key"
ARTISAN_TOOLS = "Artisan's Fine Tools"
BROKEN_COMPASS = "Broken Compass"
TRUE_COMPASS = "True Compass"


class Direction(str, Enum):
    """Cardinal directions; north is -y."""

    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"

    @property
    def delta(self) -> Tuple[int, int]:
        return DELTAS[self]

    @property
    def opposite(self) -> "Direction":
        return OPPOSITES[self]

    @classmethod
    def parse(cls, value: Union["Direction", str]) -> "Direction":
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown direction: {value!r}") from None


# Cardinal directions as (dx, dy)
DELTAS: Dict[Direction, Tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.SOUTH: (0, 1),
    Direction.EAST: (1, 0),
    Direction.WEST: (-1, 0),
}

OPPOSITES: Dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.SOUTH: Direction.NORTH,
    Direction.EAST: Direction.WEST,
    Direction.WEST: Direction.EAST,
}
