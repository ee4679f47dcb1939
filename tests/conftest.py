import random
import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from labyrinth import Labyrinth  # noqa: E402
from labyrinth.config import LabyrinthConfig  # noqa: E402
from labyrinth.constants import Direction  # noqa: E402
from labyrinth.dungeon.grid import Coord  # noqa: E402
from labyrinth.enemies import Enemy  # noqa: E402


class FixedRandom(random.Random):
    """random() always returns value; choice/randrange still work off a seed."""

    def __init__(self, value: float, seed: int = 0) -> None:
        super().__init__(seed)
        self.value = value

    def random(self) -> float:
        return self.value


@pytest.fixture
def fixed_rng():
    return FixedRandom


@pytest.fixture
def small_config():
    return LabyrinthConfig(map_width=6, map_height=6, num_floors=3)


@pytest.fixture
def quiet_config():
    # No random items, fixtures, enemies, torches or hidden passages
    return LabyrinthConfig(
        map_width=6,
        map_height=6,
        num_floors=3,
        items_per_floor=0,
        static_items_per_floor=0,
        base_enemies=0,
        enemies_per_floor=0,
        torch_chance=0.0,
        hidden_passage_chance=0.0,
        boss_ambient_chance=0.0,
    )


@pytest.fixture
def game(small_config):
    return Labyrinth(config=small_config, seed=1234)


@pytest.fixture
def quiet_game(quiet_config):
    lab = Labyrinth(config=quiet_config, seed=99)
    lab.clear_messages()
    return lab


@pytest.fixture
def open_floor():
    """Open every passage on a floor of a game."""

    def _open(lab, floor=None):
        grid = lab.state.floor_grid(floor)
        for room in grid.rooms():
            for direction in (Direction.EAST, Direction.SOUTH):
                grid.open_passage(room, direction)
        return grid

    return _open


@pytest.fixture
def spawn_enemy():
    """Place a hand-built enemy into a game at coord."""

    def _spawn(lab, coord, enemy_id="enemy-1", health=20, attack=8, defense=0, is_boss=False):
        enemy = Enemy(
            id=enemy_id,
            name="Test Goblin" if not is_boss else "Test Boss",
            description="",
            health=health,
            max_health=health,
            attack=attack,
            defense=defense,
            speed=1000,
            floor=coord.floor,
            is_boss=is_boss,
        )
        lab.state.enemies[enemy_id] = enemy
        assert lab.state.index.place_enemy(coord, enemy_id)
        return enemy

    return _spawn


@pytest.fixture
def place_player():
    """Teleport the player to (x, y) on the given floor."""

    def _place(lab, x, y, floor=None):
        floor = lab.get_current_floor() if floor is None else floor
        coord = Coord(x, y, floor)
        lab.state.relocate_player(coord)
        return lab.state.grid.room_at(coord)

    return _place
