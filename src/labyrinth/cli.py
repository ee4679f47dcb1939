from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence, Union

from .config import LabyrinthConfig
from .exceptions import LabyrinthError
from .game import Labyrinth
from .logging_config import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="labyrinth", description="Generate a labyrinth and print one floor")
    parser.add_argument("--seed", type=str, default=None, help="Master seed (int or string)")
    parser.add_argument("--floor", type=int, default=0, help="Floor index to render")
    parser.add_argument("--config", type=Path, default=None, help="YAML file overlaying the default config")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    return parser.parse_args(argv)


def _seed(value: Optional[str]) -> Optional[Union[int, str]]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return value


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(getattr(logging, args.log_level.upper(), logging.WARNING))

    try:
        config = LabyrinthConfig.load(args.config)
        game = Labyrinth(config=config, seed=_seed(args.seed))
    except LabyrinthError as exc:
        logger.error("Cannot build labyrinth: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if not 0 <= args.floor < config.num_floors:
        print(f"error: floor must be within [0, {config.num_floors - 1}]", file=sys.stderr)
        return 2

    print(f"Seed: {game.rngm.get_master_seed_hex()}  Floor: {args.floor}")
    print(game.render(args.floor))
    objective = game.get_current_objective()
    print(f"Objective: {objective.title} - {objective.description}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
