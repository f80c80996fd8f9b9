"""Decoding layer for provider payloads.

Turns loosely-typed PokéAPI JSON into catalog dataclasses:
- creature payload -> ``CreatureDraft`` (stats possibly incomplete)
- move payload -> ``MoveDetail``

Performs no network or storage access. Stat completeness is checked
separately by ``validate``.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional, Tuple

from .models import CreatureDraft, MoveDetail
from .naming import normalize_name

_MOVE_URL_RE = re.compile(r"(?:^|/)(\d+)/?$")


def move_id_from_url(url: Any) -> Optional[int]:
    """Extract the numeric move id from the final path segment of ``url``.

    Returns ``None`` when the reference is malformed.
    """
    if not isinstance(url, str):
        return None
    m = _MOVE_URL_RE.search(url.strip())
    return int(m.group(1)) if m else None


def _field(node: Any, key: str) -> Any:
    """Return ``node[key]`` when ``node`` is a JSON object, else None."""
    return node.get(key) if isinstance(node, dict) else None


def _normalize_text(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    # PokéAPI flavor text uses newlines and form feed characters.
    text = re.sub(r"\s+", " ", value.replace("\f", " ").replace("\n", " ")).strip()
    return text or None


def pick_flavor_text(entries: Any, language: str) -> Optional[str]:
    """Return the last flavor text entry tagged with ``language``."""
    if not isinstance(entries, list):
        return None
    for entry in reversed(entries):
        if not isinstance(entry, dict):
            continue
        lang = _field(entry.get("language"), "name")
        if lang != language:
            continue
        text = entry.get("flavor_text")
        return _normalize_text(text) if isinstance(text, str) else None
    return None


def _extract_types(data: Dict[str, Any]) -> List[str]:
    types = data.get("types")
    if not isinstance(types, list):
        return []

    parsed: List[Tuple[int, str]] = []
    for index, t in enumerate(types):
        if not isinstance(t, dict):
            continue
        slot = t.get("slot")
        type_name = _field(t.get("type"), "name")
        if not isinstance(type_name, str) or not type_name.strip():
            continue
        parsed.append((slot if isinstance(slot, int) else index + 1, normalize_name(type_name)))
    parsed.sort(key=lambda x: x[0])
    return [name for _, name in parsed[:2]]


def _extract_stats(data: Dict[str, Any]) -> Dict[str, int]:
    stats = data.get("stats")
    if not isinstance(stats, list):
        return {}

    by_name: Dict[str, int] = {}
    for s in stats:
        if not isinstance(s, dict):
            continue
        base = s.get("base_stat")
        name = _field(s.get("stat"), "name")
        # bool is an int subclass
        if isinstance(base, bool) or not isinstance(base, int) or base < 0:
            continue
        if isinstance(name, str):
            by_name[name] = base
    return by_name


def _extract_move_ids(data: Dict[str, Any]) -> List[int]:
    moves = data.get("moves")
    if not isinstance(moves, list):
        return []

    seen: set[int] = set()
    out: List[int] = []
    for m in moves:
        if not isinstance(m, dict):
            continue
        move_id = move_id_from_url(_field(m.get("move"), "url"))
        if move_id is None or move_id in seen:
            continue
        seen.add(move_id)
        out.append(move_id)
    return out


def _pick_artwork(data: Dict[str, Any]) -> Optional[str]:
    sprites = data.get("sprites")
    official = _field(_field(sprites, "other"), "official-artwork")
    for url in (_field(official, "front_default"), _field(sprites, "front_default")):
        if isinstance(url, str) and url.strip():
            return url
    return None


def build_creature_draft(payload: Any) -> Optional[CreatureDraft]:
    """Build a ``CreatureDraft`` from a raw creature payload.

    Returns None when the payload lacks an integer id or a name; missing
    stats and types are left for validation to report.
    """
    if not isinstance(payload, dict):
        return None

    creature_id = payload.get("id")
    name = payload.get("name")
    if isinstance(creature_id, bool) or not isinstance(creature_id, int):
        return None
    if not isinstance(name, str) or not name.strip():
        return None

    return CreatureDraft(
        id=creature_id,
        name=normalize_name(name),
        types=_extract_types(payload),
        stats=_extract_stats(payload),
        move_ids=_extract_move_ids(payload),
        artwork_url=_pick_artwork(payload),
    )


def build_move_detail(payload: Any, language: str = "en") -> Optional[MoveDetail]:
    """Build a ``MoveDetail`` from a raw move payload, or None if unusable."""
    if not isinstance(payload, dict):
        return None

    move_id = payload.get("id")
    name = payload.get("name")
    if isinstance(move_id, bool) or not isinstance(move_id, int):
        return None
    if not isinstance(name, str):
        return None

    type_name = _field(payload.get("type"), "name")
    damage_class = _field(payload.get("damage_class"), "name")
    if not isinstance(type_name, str):
        return None

    power = payload.get("power")
    power = power if isinstance(power, int) and not isinstance(power, bool) else None

    return MoveDetail(
        id=move_id,
        name=name,
        type=normalize_name(type_name),
        power=power,
        damage_class=damage_class if isinstance(damage_class, str) else "",
        flavor_text=pick_flavor_text(payload.get("flavor_text_entries"), language),
    )
