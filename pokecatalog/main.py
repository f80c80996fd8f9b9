"""CLI entry point for the creature catalog.

Supports running via ``python -m pokecatalog.main``:
- ``resolve <identifier>``: print a creature, synchronizing it on a miss
- ``moves <identifier>``: print the creature's selected moves
- ``export``: write the stored catalog to xlsx or JSON
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_CONFIG_PATH, Settings, load_config, settings_from_config
from .errors import CatalogError, TransientFetchError
from .export import run_export
from .models import CreatureRecord
from .naming import display_name
from .store import CatalogStore
from .sync import CatalogSynchronizer

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _print_creature(record: CreatureRecord) -> None:
    types = "/".join(record.types)
    print(f"#{record.id:<5d} {display_name(record.name)} [{types}]")
    print(
        f"  hp={record.hp} atk={record.attack} def={record.defense} "
        f"spa={record.special_attack} spd={record.special_defense} spe={record.speed}"
    )
    if record.artwork_url:
        print(f"  artwork: {record.artwork_url}")


def run_resolve(synchronizer: CatalogSynchronizer, identifier: str, as_json: bool) -> int:
    record = synchronizer.resolve(identifier)
    if as_json:
        print(json.dumps(record.as_dict(), indent=2))
    else:
        _print_creature(record)
    return 0


def run_moves(synchronizer: CatalogSynchronizer, identifier: str, as_json: bool) -> int:
    moves = synchronizer.get_moves(identifier)
    if as_json:
        print(json.dumps([m.as_dict() for m in moves], indent=2))
        return 0
    if not moves:
        print(f"No moves selected for {identifier}")
        return 0
    for move in moves:
        print(f"- {display_name(move.name):20s} {move.type:10s} power={move.power}")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    """Build and return the top-level CLI argument parser."""
    parser = argparse.ArgumentParser(prog="pokecatalog")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH)
    sub = parser.add_subparsers(dest="command")

    resolve = sub.add_parser("resolve")
    resolve.add_argument("identifier")
    resolve.add_argument("--json", action="store_true")

    moves = sub.add_parser("moves")
    moves.add_argument("identifier")
    moves.add_argument("--json", action="store_true")

    export = sub.add_parser("export")
    export.add_argument("--format", choices=["xlsx", "json"], default="xlsx")
    export.add_argument("--output", default=None)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    settings: Settings = settings_from_config(load_config(args.config))
    configure_logging(settings.log_level)

    try:
        if args.command == "export":
            store = CatalogStore(settings.database_url)
            path = run_export(
                store,
                fmt=args.format,
                output=args.output,
                source=settings.pokeapi_base_url,
            )
            print(f"export: wrote {path}")
            return 0

        synchronizer = CatalogSynchronizer.from_settings(settings)
        if args.command == "resolve":
            return run_resolve(synchronizer, args.identifier, args.json)
        return run_moves(synchronizer, args.identifier, args.json)
    except TransientFetchError as exc:
        logger.debug("provider failure", exc_info=True)
        if exc.status_code == 404:
            print(f"Unknown creature: {args.identifier}", file=sys.stderr)
        else:
            print(f"Error: {exc}", file=sys.stderr)
        return 1
    except CatalogError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
