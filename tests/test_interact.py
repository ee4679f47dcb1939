import random

import pytest

from labyrinth import Labyrinth
from labyrinth.constants import ARTISAN_TOOLS, BROKEN_COMPASS, LABYRINTH_KEY, TRUE_COMPASS
from labyrinth.items import Catalog
from labyrinth.state import ResultType


def _go_to(lab, flag, floor=None):
    floor_grid = lab.state.floor_grid(floor)
    room = floor_grid.find(flag)
    lab.state.relocate_player(room.coord)
    lab.clear_messages()
    return room


def _reveal_static(lab, name, coord=None):
    static = lab.catalog.by_name(name)
    coord = coord or lab.get_player_location()
    lab.state.index.place_static(coord, static.id)
    lab.state.index.reveal(coord)
    return static


def _give(lab, name):
    lab.state.player.inventory.add_item(lab.catalog.by_name(name))


def test_locked_exit_without_key(quiet_game):
    _go_to(quiet_game, "has_exit", floor=quiet_game.config.final_floor)
    assert quiet_game.interact() is False
    assert not quiet_game.is_game_over()
    assert any("locked" in m for m in quiet_game.get_messages())


def test_exit_with_key_is_victory(quiet_game):
    _go_to(quiet_game, "has_exit", floor=quiet_game.config.final_floor)
    _give(quiet_game, LABYRINTH_KEY)
    results = []
    quiet_game.events.subscribe("game_over", results.append)

    assert quiet_game.interact(player_name="Ada", elapsed_time=321)

    assert quiet_game.is_game_over()
    assert quiet_game.is_boss_defeated()
    result = quiet_game.get_game_result()
    assert result.type == ResultType.VICTORY
    assert (result.name, result.time, result.deaths) == ("Ada", 321, 0)
    assert result.to_dict() == {"type": "victory", "name": "Ada", "time": 321, "deaths": 0}
    assert results == [result]


def test_stairs_down_then_up(quiet_game):
    down_room = _go_to(quiet_game, "has_stairs_down", floor=0)
    assert quiet_game.interact()
    assert quiet_game.get_current_floor() == 1
    location = quiet_game.get_player_location()
    assert location.floor == 1
    arrival = quiet_game.state.grid.room_at(location)
    assert arrival.has_entrance and arrival.has_stairs_up and arrival.has_player
    assert not down_room.has_player
    assert (location.x, location.y) in quiet_game.get_visited_cells()

    assert quiet_game.interact()
    assert quiet_game.get_player_location() == down_room.coord
    assert quiet_game.get_current_floor() == 0


def test_nothing_to_interact_with(quiet_game, place_player):
    grid = quiet_game.state.floor_grid()
    plain = next(r for r in grid.rooms() if not r.has_marker())
    place_player(quiet_game, plain.x, plain.y)
    quiet_game.clear_messages()
    assert quiet_game.interact() is False
    assert quiet_game.get_messages() == ["There's nothing here to interact with."]


def test_boss_markers_are_flavour_only(quiet_game):
    _go_to(quiet_game, "has_boss_entrance", floor=quiet_game.config.final_floor)
    health = quiet_game.get_player_health()
    assert quiet_game.interact()
    assert len(quiet_game.get_messages()) == 1
    assert quiet_game.get_player_health() == health
    assert not quiet_game.is_game_over()


@pytest.fixture
def plain_room(quiet_game, place_player):
    grid = quiet_game.state.floor_grid()
    room = next(r for r in grid.rooms() if not r.has_marker())
    place_player(quiet_game, room.x, room.y)
    quiet_game.clear_messages()
    return room


def test_unrevealed_static_is_ignored(quiet_game, plain_room):
    well = quiet_game.catalog.by_name("Whispering Well")
    quiet_game.state.index.place_static(plain_room.coord, well.id)
    quiet_game.state.player.health = 10
    quiet_game.interact()
    assert quiet_game.get_player_health() == 10


def test_whispering_well_heals_fully(quiet_game, plain_room):
    _reveal_static(quiet_game, "Whispering Well")
    quiet_game.state.player.health = 10
    assert quiet_game.interact()
    assert quiet_game.get_player_health() == quiet_game.get_player_max_health()
    # The well stays for another drink
    assert plain_room.coord in quiet_game.state.index.static_items


def test_hidden_spring_raises_radius_to_max(quiet_game, plain_room):
    _reveal_static(quiet_game, "Hidden Spring")
    cfg = quiet_game.config
    for _ in range(cfg.max_search_radius + 2):
        quiet_game.interact()
    assert quiet_game.get_search_radius() == cfg.max_search_radius


def test_mysterious_box_grants_key(quiet_game, plain_room):
    _reveal_static(quiet_game, "Mysterious Box")
    quiet_game.interact()
    assert quiet_game.state.has_item(LABYRINTH_KEY)
    assert plain_room.coord not in quiet_game.state.index.static_items
    assert plain_room.coord not in quiet_game.get_revealed_static_items()


def test_triggered_trap_damages_once(quiet_game, plain_room):
    _reveal_static(quiet_game, "Triggered Trap")
    quiet_game.interact()
    assert quiet_game.get_player_health() == quiet_game.get_player_max_health() - quiet_game.config.trap_damage
    assert plain_room.coord not in quiet_game.state.index.static_items
    quiet_game.interact()
    assert quiet_game.get_player_health() == quiet_game.get_player_max_health() - quiet_game.config.trap_damage


def test_trap_can_kill(quiet_game, plain_room):
    _reveal_static(quiet_game, "Triggered Trap")
    quiet_game.state.player.health = 3
    quiet_game.interact()
    assert quiet_game.is_game_over()
    assert quiet_game.get_deaths() == 1
    assert quiet_game.get_game_result().cause_of_death == "Triggered Trap"


@pytest.mark.parametrize("name", ["Ancient Altar", "Mysterious Staircase", "Grand Riddle of Eternity"])
def test_flavour_fixtures_change_nothing(quiet_game, plain_room, name):
    _reveal_static(quiet_game, name)
    assert quiet_game.interact()
    assert len(quiet_game.get_messages()) == 1
    assert plain_room.coord in quiet_game.state.index.static_items
    assert quiet_game.get_inventory() == []


def test_ancient_mechanism_needs_its_tool(quiet_game, plain_room):
    _reveal_static(quiet_game, "Ancient Mechanism")
    exits = dict(plain_room.exits)
    quiet_game.interact()
    assert plain_room.exits == exits
    assert plain_room.coord in quiet_game.state.index.static_items
    assert any("Prismatic Lens" in m for m in quiet_game.get_messages())


def test_ancient_mechanism_opens_passage_and_consumes_tool(quiet_game, plain_room):
    _reveal_static(quiet_game, "Ancient Mechanism")
    _give(quiet_game, "Prismatic Lens")
    grid = quiet_game.state.floor_grid()
    before = sum(1 for r in grid.rooms() for d in r.exits.values() if d)

    quiet_game.interact()

    after = sum(1 for r in grid.rooms() for d in r.exits.values() if d)
    assert after == before + 2
    assert not quiet_game.state.has_item("Prismatic Lens")
    assert plain_room.coord not in quiet_game.state.index.static_items


def test_repair_bench_mends_compass(quiet_game, plain_room):
    _reveal_static(quiet_game, "Ancient Repair Bench")
    _give(quiet_game, ARTISAN_TOOLS)
    _give(quiet_game, BROKEN_COMPASS)
    quiet_game.interact()
    assert quiet_game.state.has_item(TRUE_COMPASS)
    assert not quiet_game.state.has_item(BROKEN_COMPASS)
    assert quiet_game.state.has_item(ARTISAN_TOOLS)


def test_repair_bench_without_tools(quiet_game, plain_room):
    _reveal_static(quiet_game, "Ancient Repair Bench")
    _give(quiet_game, BROKEN_COMPASS)
    quiet_game.interact()
    assert quiet_game.state.has_item(BROKEN_COMPASS)
    assert not quiet_game.state.has_item(TRUE_COMPASS)


def test_unknown_fixture_does_nothing(quiet_config):
    data = {
        "items": [],
        "quest_items": [
            {"name": ARTISAN_TOOLS, "type": "key"},
            {"name": LABYRINTH_KEY, "type": "key"},
        ],
        "static_items": [{"name": "Odd Stone", "type": "static", "kind": "unknown"}],
        "enemies": [],
        "boss": {"name": "Big Rat"},
    }
    lab = Labyrinth(config=quiet_config, seed=1, catalog=Catalog(data, rng=random.Random(0)))
    stone = lab.catalog.by_name("Odd Stone")
    here = lab.get_player_location()
    lab.state.index.place_static(here, stone.id)
    lab.state.index.reveal(here)
    lab.clear_messages()
    lab.interact()
    assert lab.get_messages() == ["Nothing happens."]
