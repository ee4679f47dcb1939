from __future__ import annotations

import logging
from typing import Callable, Dict, List, Tuple, Union

from .combat import CombatResolver
from .constants import ARTISAN_TOOLS, BROKEN_COMPASS, LABYRINTH_KEY, TRUE_COMPASS, Direction
from .dungeon.grid import Room
from .events import SoundCue
from .items.models import AUTO_PICKUP_TYPES, Item, ItemType, StaticKind
from .player.player import EffectKind
from .state import GameState, ResultType

logger = logging.getLogger(__name__)

GAME_OVER_MESSAGE = "The game is over. Please restart."

StaticHandler = Callable[[Item, Room], None]


class ActionResolver:
    """Player actions as validated state transitions.

    Invalid actions never raise: they leave state untouched and explain
    themselves through the message log.
    """

    def __init__(self, state: GameState, combat: CombatResolver) -> None:
        self.state = state
        self.combat = combat
        self._static_handlers: Dict[StaticKind, StaticHandler] = {
            StaticKind.ANCIENT_MECHANISM: self._ancient_mechanism,
            StaticKind.WHISPERING_WELL: self._whispering_well,
            StaticKind.HIDDEN_SPRING: self._hidden_spring,
            StaticKind.MYSTERIOUS_BOX: self._mysterious_box,
            StaticKind.ANCIENT_ALTAR: self._ancient_altar,
            StaticKind.MYSTERIOUS_STAIRCASE: self._mysterious_staircase,
            StaticKind.GRAND_RIDDLE: self._grand_riddle,
            StaticKind.TRIGGERED_TRAP: self._triggered_trap,
            StaticKind.REPAIR_BENCH: self._repair_bench,
        }

    def _game_over(self) -> bool:
        if self.state.player.is_game_over:
            self.state.message(GAME_OVER_MESSAGE)
            return True
        return False

    # ---- Move ------------------------------------------------------------
    def move(self, direction: Union[Direction, str]) -> bool:
        direction = Direction.parse(direction)
        if self._game_over():
            return False
        state = self.state
        room = state.current_room()
        dest = state.player.location.step(direction)
        if not room.is_open(direction) or state.grid.room_at(dest) is None:
            state.message("You can't go that way.")
            state.sound(SoundCue.BLOCKED)
            return False

        state.relocate_player(dest)
        state.sound(SoundCue.MOVE)
        logger.debug("Player moved %s to %s", direction.value, dest)

        enemy_id = state.index.enemies.get(dest)
        enemy = state.enemies.get(enemy_id) if enemy_id else None
        if enemy is not None and not enemy.defeated:
            state.message(f"A {enemy.name} lurks here! {enemy.description}")

        self._auto_pickup()
        return True

    def _auto_pickup(self) -> None:
        state = self.state
        coord = state.player.location
        item = state.catalog.get(state.index.items.get(coord, ""))
        if item is None or item.type not in AUTO_PICKUP_TYPES:
            return
        state.index.take_item(coord)
        state.give_item(item)
        state.message(f"You picked up the {item.name}.")

    # ---- Search ----------------------------------------------------------
    def search(self) -> bool:
        """Search the current room once. Returns True if anything was found."""
        if self._game_over():
            return False
        state = self.state
        room = state.current_room()
        if room.searched:
            state.message("You have already searched this room.")
            return False
        room.searched = True
        coord = room.coord
        found = False

        item = state.catalog.get(state.index.items.get(coord, ""))
        if item is not None:
            state.index.take_item(coord)
            state.give_item(item)
            state.message(f"You found a {item.name}! {item.description}")
            found = True

        if state.index.reveal(coord):
            static = state.catalog.get(state.index.static_items[coord])
            name = static.name if static else "strange fixture"
            state.message(f"You discovered a {name}!")
            found = True

        if state.rng.random() < state.config.hidden_passage_chance:
            floor_grid = state.floor_grid()
            closed = floor_grid.closed_passages(room)
            if closed:
                direction = state.rng.choice(closed)
                floor_grid.open_passage(room, direction)
                state.message(f"You discovered a hidden passage leading {direction.value}!")
                found = True

        self._reveal_surroundings(room)
        if not found:
            state.message("You search the area but find nothing new.")
        return found

    def _reveal_surroundings(self, room: Room) -> None:
        radius = self.state.player.search_radius
        floor_grid = self.state.floor_grid()
        for y in range(room.y - radius, room.y + radius + 1):
            for x in range(room.x - radius, room.x + radius + 1):
                other = floor_grid.room(x, y)
                if other is not None:
                    other.visited = True

    # ---- Interact --------------------------------------------------------
    def interact(self) -> bool:
        """Use whatever the current room offers, highest priority first."""
        if self._game_over():
            return False
        state = self.state
        room = state.current_room()
        coord = room.coord

        if state.index.is_revealed(coord):
            static = state.catalog.get(state.index.static_items[coord])
            if static is not None:
                self._dispatch_static(static, room)
                return True
        if room.has_stairs_down:
            return self._descend(room)
        if room.has_stairs_up:
            return self._ascend(room)
        if room.has_exit:
            return self._try_exit()
        if room.has_boss_entrance:
            state.message("A massive door looms before you. The air grows cold beyond it.")
            return True
        if room.has_boss_exit:
            state.message("A narrow passage leads away from the Watcher's lair.")
            return True
        state.message("There's nothing here to interact with.")
        return False

    def _descend(self, room: Room) -> bool:
        state = self.state
        link = state.stairs.get(room.floor)
        if link is None:
            state.message("The stairs lead nowhere.")
            return False
        state.relocate_player(link.up)
        state.sound(SoundCue.STAIRS)
        state.message(f"You descend the stairs to floor {link.up.floor + 1}.")
        logger.info("Player descended to floor %d", link.up.floor)
        return True

    def _ascend(self, room: Room) -> bool:
        state = self.state
        link = state.stairs.get(room.floor - 1)
        if link is None or link.up != room.coord:
            state.message("The stairs lead nowhere.")
            return False
        state.relocate_player(link.down)
        state.sound(SoundCue.STAIRS)
        state.message(f"You climb the stairs back to floor {link.down.floor + 1}.")
        logger.info("Player ascended to floor %d", link.down.floor)
        return True

    def _try_exit(self) -> bool:
        state = self.state
        if not state.has_item(LABYRINTH_KEY):
            state.message(f"The exit is locked. You need the {LABYRINTH_KEY}.")
            state.sound(SoundCue.DOOR_LOCKED)
            return False
        state.player.boss_defeated = True
        state.message("The Labyrinth Key turns in the lock. You escape the Labyrinth!")
        state.sound(SoundCue.VICTORY)
        state.finish(ResultType.VICTORY)
        return True

    # ---- Static fixtures -------------------------------------------------
    def _dispatch_static(self, static: Item, room: Room) -> None:
        handler = self._static_handlers.get(static.static_kind)
        if handler is None:
            self.state.message("Nothing happens.")
            return
        logger.debug("Interacting with %s at %s", static.name, room.coord)
        handler(static, room)

    def _hidden_passage_candidates(self, room: Room) -> List[Tuple[Room, Direction]]:
        floor_grid = self.state.floor_grid()
        here = [(room, d) for d in floor_grid.closed_passages(room)]
        if here:
            return here
        return [(r, d) for r in floor_grid.rooms() for d in floor_grid.closed_passages(r)]

    def _ancient_mechanism(self, static: Item, room: Room) -> None:
        state = self.state
        tool = state.player.inventory.find_by_name(static.requires) if static.requires else None
        if static.requires and tool is None:
            state.message(f"The {static.name} seems incomplete. Perhaps a {static.requires} would fit.")
            return
        if tool is not None:
            state.player.inventory.remove_one(tool.item.id)
        candidates = self._hidden_passage_candidates(room)
        if candidates:
            target, direction = state.rng.choice(candidates)
            state.floor_grid().open_passage(target, direction)
            state.message(f"Gears grind as the {static.name} opens a hidden passage {direction.value}!")
        else:
            state.message(f"The {static.name} whirs, but every passage is already open.")
        state.index.remove_static(room.coord)

    def _whispering_well(self, static: Item, room: Room) -> None:
        state = self.state
        state.player.heal(state.player.max_health)
        state.sound(SoundCue.HEAL)
        state.message(
            f"You drink from the {static.name}. Health fully restored: "
            f"{state.player.health}/{state.player.max_health}"
        )

    def _hidden_spring(self, static: Item, room: Room) -> None:
        state = self.state
        if state.player.increase_search_radius():
            state.message(f"The {static.name} sharpens your senses. Search radius: {state.player.search_radius}")
        else:
            state.message(f"The {static.name} refreshes you, but your senses are already keen.")

    def _mysterious_box(self, static: Item, room: Room) -> None:
        state = self.state
        state.give_item(state.catalog.by_name(LABYRINTH_KEY))
        state.index.remove_static(room.coord)
        state.message(f"You open the {static.name} and find the {LABYRINTH_KEY}!")

    def _ancient_altar(self, static: Item, room: Room) -> None:
        self.state.message("You kneel at the altar. Faint runes glow, then fade.")

    def _mysterious_staircase(self, static: Item, room: Room) -> None:
        self.state.message("The staircase climbs into solid rock. It leads nowhere you can follow.")

    def _grand_riddle(self, static: Item, room: Room) -> None:
        self.state.message('The riddle reads: "What walks the halls yet never leaves?"')

    def _triggered_trap(self, static: Item, room: Room) -> None:
        state = self.state
        state.index.remove_static(room.coord)
        state.sound(SoundCue.TRAP)
        state.message(f"The {static.name} springs!")
        self.combat.take_damage(state.config.trap_damage, static.name)

    def _repair_bench(self, static: Item, room: Room) -> None:
        state = self.state
        inventory = state.player.inventory
        tool_name = static.requires or ARTISAN_TOOLS
        if not state.has_item(tool_name):
            state.message(f"The {static.name} is useless without the {tool_name}.")
            return
        broken = inventory.find_by_name(BROKEN_COMPASS)
        if broken is None:
            state.message(f"You have nothing to repair at the {static.name}.")
            return
        inventory.remove_one(broken.item.id)
        state.give_item(state.catalog.by_name(TRUE_COMPASS))
        state.message(f"Using the {tool_name}, you mend the {BROKEN_COMPASS} into a {TRUE_COMPASS}!")

    # ---- Use item --------------------------------------------------------
    def use_item(self, item_id: str) -> bool:
        if self._game_over():
            return False
        state = self.state
        inventory = state.player.inventory
        entry = inventory.get(item_id)
        if entry is None:
            state.message("You don't have that item.")
            return False
        item = entry.item

        if entry.is_equipped:
            inventory.unequip(item_id)
            state.message(f"You unequipped the {item.name}.")
            return True

        if item.type == ItemType.CONSUMABLE:
            self._consume(item)
            inventory.remove_one(item_id)
            return True

        if item.is_equipment():
            previous = inventory.equip(item_id)
            if previous:
                prev_item = inventory.get(previous).item
                state.message(f"You equipped the {item.name}, replacing the {prev_item.name}.")
            else:
                state.message(f"You equipped the {item.name}.")
            return True

        state.message(f"You can't use the {item.name} that way.")
        return False

    def _consume(self, item: Item) -> None:
        state = self.state
        player = state.player
        if item.effect == "heal":
            healed = player.heal(item.value or 0)
            state.sound(SoundCue.HEAL)
            state.message(
                f"You used the {item.name} and recovered {healed} health. "
                f"Health: {player.health}/{player.max_health}"
            )
        elif item.effect == EffectKind.REGEN.value:
            player.add_effect(EffectKind.REGEN, item.duration or 1, item.value or 0)
            state.message(f"You drink the {item.name}. Warmth spreads through you as your wounds begin to close.")
        elif item.effect == EffectKind.INVINCIBILITY.value:
            player.add_effect(EffectKind.INVINCIBILITY, item.duration or 1)
            state.message(f"The {item.name} flares. A shimmering ward surrounds you.")
        else:
            logger.warning("Unknown consumable effect %r on %s", item.effect, item.name)
            state.message(f"You used the {item.name}, but nothing seems to happen.")
