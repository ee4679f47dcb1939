import logging
from dataclasses import replace

from labyrinth.constants import BROKEN_COMPASS, LABYRINTH_KEY, TRUE_COMPASS
from labyrinth.items import EquipmentSlot
from labyrinth.player import EffectKind


def _give(lab, name, qty=1):
    item = lab.catalog.by_name(name)
    lab.state.player.inventory.add_item(item, qty)
    return item


def _entry(lab, item):
    return lab.state.player.inventory.get(item.id)


def test_missing_item(quiet_game):
    assert quiet_game.use_item("nope") is False
    assert quiet_game.get_messages() == ["You don't have that item."]


def test_heal_is_bounded_and_consumes(quiet_game):
    water = _give(quiet_game, "Living Water")
    quiet_game.state.player.health = 80
    assert quiet_game.use_item(water.id)
    assert quiet_game.get_player_health() == 100
    assert _entry(quiet_game, water) is None


def test_heal_at_full_health_still_consumes(quiet_game):
    vial = _give(quiet_game, "Vial of Lumina", qty=2)
    quiet_game.use_item(vial.id)
    assert quiet_game.get_player_health() == quiet_game.get_player_max_health()
    assert _entry(quiet_game, vial).quantity == 1


def test_stackable_items_accumulate(quiet_game):
    vial = _give(quiet_game, "Vial of Lumina")
    _give(quiet_game, "Vial of Lumina")
    assert _entry(quiet_game, vial).quantity == 2


def test_non_stackable_duplicate_keeps_single_entry(quiet_game):
    blade = _give(quiet_game, "Blade of the Labyrinth")
    _give(quiet_game, "Blade of the Labyrinth")
    assert _entry(quiet_game, blade).quantity == 1
    assert len(quiet_game.get_inventory()) == 1


def test_duplicate_pickup_logs_nothing_added(quiet_game, caplog):
    blade = _give(quiet_game, "Blade of the Labyrinth")
    with caplog.at_level(logging.DEBUG, logger="labyrinth.player.inventory"):
        _give(quiet_game, "Blade of the Labyrinth")
        _give(quiet_game, "Vial of Lumina", qty=3)
    assert f"Added 0 x {blade.id} (total=1)" in caplog.text
    assert "Added 3 x " in caplog.text


def test_inventory_holds_copies(quiet_game):
    vial = _give(quiet_game, "Vial of Lumina")
    entry = _entry(quiet_game, vial)
    assert entry.item == vial
    assert entry.item is not vial


def test_equip_weapon_raises_attack_and_toggles(quiet_game):
    blade = _give(quiet_game, "Blade of the Labyrinth")
    base = quiet_game.get_current_attack()
    quiet_game.use_item(blade.id)
    assert quiet_game.get_current_attack() == base + 15
    assert quiet_game.get_equipped()[EquipmentSlot.WEAPON].name == "Blade of the Labyrinth"

    quiet_game.use_item(blade.id)
    assert quiet_game.get_current_attack() == base
    assert quiet_game.get_equipped()[EquipmentSlot.WEAPON] is None
    assert _entry(quiet_game, blade).quantity == 1


def test_equip_exclusivity(quiet_game):
    blade = _give(quiet_game, "Blade of the Labyrinth")
    rusty = replace(blade, id="rusty-sword", name="Rusty Sword", value=2)
    quiet_game.state.player.inventory.add_item(rusty)

    quiet_game.use_item(blade.id)
    quiet_game.use_item(rusty.id)

    weapons = [e for e in quiet_game.get_inventory() if e.item.equipment_slot == EquipmentSlot.WEAPON]
    assert [e.item.id for e in weapons if e.is_equipped] == ["rusty-sword"]
    assert quiet_game.get_current_attack() == quiet_game.config.player_base_attack + 2
    assert any("replacing" in m for m in quiet_game.get_messages())


def test_shield_and_amulet_bonuses(quiet_game):
    shield = _give(quiet_game, "Aegis of the Guardian")
    amulet = _give(quiet_game, "Scholar's Amulet")
    cfg = quiet_game.config
    quiet_game.use_item(shield.id)
    quiet_game.use_item(amulet.id)
    assert quiet_game.get_current_defense() == cfg.player_base_defense + 5 + 5
    assert quiet_game.get_current_attack() == cfg.player_base_attack + 5


def test_compass_and_amulet_use_separate_slots(quiet_game):
    amulet = _give(quiet_game, "Scholar's Amulet")
    compass = _give(quiet_game, BROKEN_COMPASS)
    quiet_game.use_item(amulet.id)
    quiet_game.use_item(compass.id)
    equipped = quiet_game.get_equipped()
    assert equipped[EquipmentSlot.AMULET].id == amulet.id
    assert equipped[EquipmentSlot.COMPASS].id == compass.id


def test_keys_cannot_be_used(quiet_game):
    key = _give(quiet_game, LABYRINTH_KEY)
    assert quiet_game.use_item(key.id) is False
    assert quiet_game.get_messages() == [f"You can't use the {LABYRINTH_KEY} that way."]


def test_regen_heals_over_ticks(quiet_game):
    flask = _give(quiet_game, "Enchanted Flask")
    quiet_game.state.player.health = 50
    quiet_game.use_item(flask.id)
    assert [e.kind for e in quiet_game.get_active_effects()] == [EffectKind.REGEN]
    assert quiet_game.get_player_health() == 50

    for _ in range(5):
        quiet_game.process_enemy_movement()
    assert quiet_game.get_player_health() == 75
    assert quiet_game.get_active_effects() == []
    assert any("wears off" in m for m in quiet_game.get_messages())

    quiet_game.process_enemy_movement()
    assert quiet_game.get_player_health() == 75


def test_invincibility_blocks_damage_until_expiry(quiet_game):
    crystal = _give(quiet_game, "Pulsating Crystal")
    quiet_game.use_item(crystal.id)
    assert quiet_game.take_damage(40, "a goblin") == 0
    assert quiet_game.get_player_health() == 100

    for _ in range(3):
        quiet_game.process_enemy_movement()
    assert quiet_game.take_damage(40, "a goblin") == 40
    assert quiet_game.get_player_health() == 60


def test_removing_equipped_item_clears_slot(quiet_game):
    compass = _give(quiet_game, BROKEN_COMPASS)
    quiet_game.use_item(compass.id)
    quiet_game.state.player.inventory.remove_one(compass.id)
    assert quiet_game.get_equipped()[EquipmentSlot.COMPASS] is None


def test_true_compass_heading(quiet_game, place_player):
    compass = _give(quiet_game, TRUE_COMPASS)
    assert quiet_game.get_compass_heading() is None
    quiet_game.use_item(compass.id)
    stairs = quiet_game.state.floor_grid().find("has_stairs_down")
    place_player(quiet_game, stairs.x, stairs.y)
    assert quiet_game.get_compass_heading() is None
    if stairs.x > 0:
        place_player(quiet_game, 0, stairs.y)
        assert quiet_game.get_compass_heading().value == "east"
    else:
        place_player(quiet_game, quiet_game.config.map_width - 1, stairs.y)
        assert quiet_game.get_compass_heading().value == "west"
