from __future__ import annotations

import logging
from enum import Enum
from threading import RLock
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class SoundCue(str, Enum):
    """Audio cue keys published on the ``sound`` event for an external mixer."""

    MOVE = "move"
    BLOCKED = "blocked"
    PICKUP = "pickup"
    ATTACK = "attack"
    HIT = "hit"
    ENEMY_DEFEATED = "enemy_defeated"
    PLAYER_DEFEATED = "player_defeated"
    VICTORY = "victory"
    STAIRS = "stairs"
    DOOR_LOCKED = "door_locked"
    HEAL = "heal"
    TRAP = "trap"


class MessageLog:
    """Pending player-facing messages, drained by the presentation layer every tick."""

    def __init__(self) -> None:
        self._messages: List[str] = []

    def add(self, msg: str) -> None:
        self._messages.append(msg)
        logger.debug("message: %s", msg)

    def snapshot(self) -> List[str]:
        return list(self._messages)

    def clear(self) -> None:
        self._messages.clear()

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(list(self._messages))


class EventBus:
    """A lightweight publish/subscribe event bus.

    - Subscribers register handlers for event names (strings).
    - Emit broadcasts payloads to all handlers of that event.

    The engine publishes ``sound`` (payload: SoundCue) and ``game_over``
    (payload: GameResult) so audio and persistence layers stay decoupled.
    """

    def __init__(self) -> None:
        self._lock = RLock()
        self._handlers: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        """Subscribe a handler to an event name."""
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)
            logger.debug("Subscribed handler %s to event '%s'", getattr(handler, "__name__", str(handler)), event)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        """Unsubscribe a handler from an event name. Silently ignores if not present."""
        with self._lock:
            if event in self._handlers and handler in self._handlers[event]:
                self._handlers[event].remove(handler)
                logger.debug("Unsubscribed handler %s from event '%s'", getattr(handler, "__name__", str(handler)), event)

    def emit(self, event: str, payload: Any = None) -> None:
        """Emit an event with an optional payload to all subscribed handlers.

        Handler exceptions are caught and logged, allowing other handlers to still run.
        """
        with self._lock:
            handlers = list(self._handlers.get(event, []))
        if not handlers:
            return
        logger.debug("Emitting event '%s' to %d handlers with payload: %r", event, len(handlers), payload)
        for handler in handlers:
            try:
                handler(payload)
            except Exception as exc:  # noqa: BLE001 - we want to log any exception from handlers
                logger.exception("Error in event handler for '%s': %s", event, exc)

    def sound(self, cue: SoundCue) -> None:
        self.emit("sound", cue)
