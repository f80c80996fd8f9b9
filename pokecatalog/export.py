"""Export layer for the creature catalog.

Writes the stored catalog either as an Excel workbook (``Creatures``,
``Moves``, ``CreatureMoves`` and ``Meta`` sheets) or as a JSON snapshot.
Reads the store only; never contacts the provider.
"""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from openpyxl import Workbook

from .naming import display_name

EXPORT_DIR = "data/export"
DEFAULT_PATHS = {
    "xlsx": os.path.join(EXPORT_DIR, "catalog.xlsx"),
    "json": os.path.join(EXPORT_DIR, "catalog.json"),
}

CREATURE_COLUMNS = [
    "ID",
    "NAME",
    "DISPLAY_NAME",
    "TYPE1",
    "TYPE2",
    "HP",
    "ATTACK",
    "DEFENSE",
    "SPECIAL_ATTACK",
    "SPECIAL_DEFENSE",
    "SPEED",
    "ARTWORK_URL",
]
MOVE_COLUMNS = ["ID", "NAME", "DISPLAY_NAME", "TYPE", "POWER", "DESCRIPTION"]
LINK_COLUMNS = ["CREATURE_ID", "MOVE_ID", "SLOT"]


def _ensure_parent(path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)


def atomic_write_json(path: str, obj: Dict[str, Any]) -> None:
    """Atomically write a JSON file by writing a temp file then renaming."""
    _ensure_parent(path)
    fd, tmp_path = tempfile.mkstemp(
        prefix=os.path.basename(path) + ".",
        suffix=".tmp",
        dir=os.path.dirname(path) or ".",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(obj, f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def build_snapshot(store: Any, source: str) -> Dict[str, Any]:
    """Collect the whole catalog into plain dicts."""
    return {
        "meta": {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "source": source,
        },
        "creatures": [rec.as_dict() for rec in store.iter_creatures()],
        "moves": [rec.as_dict() for rec in store.iter_moves()],
        "creature_moves": [
            {"creature_id": cid, "move_id": mid, "slot": slot}
            for cid, mid, slot in store.iter_links()
        ],
    }


def _write_workbook(snapshot: Dict[str, Any], path: str) -> None:
    wb = Workbook()
    default_ws = wb.active
    if default_ws is not None:
        wb.remove(default_ws)

    ws_creatures = wb.create_sheet("Creatures")
    ws_creatures.append(CREATURE_COLUMNS)
    for rec in snapshot["creatures"]:
        ws_creatures.append(
            [
                rec["id"],
                rec["name"],
                display_name(rec["name"]),
                rec["type1"],
                rec["type2"],
                rec["hp"],
                rec["attack"],
                rec["defense"],
                rec["special_attack"],
                rec["special_defense"],
                rec["speed"],
                rec["artwork_url"],
            ]
        )

    ws_moves = wb.create_sheet("Moves")
    ws_moves.append(MOVE_COLUMNS)
    for rec in snapshot["moves"]:
        ws_moves.append(
            [
                rec["id"],
                rec["name"],
                display_name(rec["name"]),
                rec["type"],
                rec["power"],
                rec["description"],
            ]
        )

    ws_links = wb.create_sheet("CreatureMoves")
    ws_links.append(LINK_COLUMNS)
    for link in snapshot["creature_moves"]:
        ws_links.append([link["creature_id"], link["move_id"], link["slot"]])

    ws_meta = wb.create_sheet("Meta")
    ws_meta.append(["KEY", "VALUE"])
    meta_rows: List[List[Any]] = [
        ["generated_at", snapshot["meta"]["generated_at"]],
        ["source", snapshot["meta"]["source"]],
        ["creatures", len(snapshot["creatures"])],
        ["moves", len(snapshot["moves"])],
        ["creature_moves", len(snapshot["creature_moves"])],
    ]
    for row in meta_rows:
        ws_meta.append(row)

    _ensure_parent(path)
    wb.save(path)


def run_export(
    store: Any,
    *,
    fmt: str = "xlsx",
    output: Optional[str] = None,
    source: str = "",
) -> str:
    """Export the catalog in ``fmt`` (``xlsx`` or ``json``); return the path written."""
    if fmt not in DEFAULT_PATHS:
        raise ValueError(f"Unsupported export format: {fmt}")
    path = output or DEFAULT_PATHS[fmt]
    snapshot = build_snapshot(store, source)
    if fmt == "json":
        atomic_write_json(path, snapshot)
    else:
        _write_workbook(snapshot, path)
    return path
