"""Stat validation.

A ``CreatureDraft`` becomes a ``CreatureRecord`` only here, after all six
base stats are confirmed present. Values are trusted; only presence is
checked.
"""

from __future__ import annotations

from typing import Mapping, Optional

from .errors import ValidationError
from .models import CreatureDraft, CreatureRecord

REQUIRED_STATS = (
    "hp",
    "attack",
    "defense",
    "special-attack",
    "special-defense",
    "speed",
)


def find_missing_stat(stats: Mapping[str, int]) -> Optional[str]:
    """Return the first required stat absent from ``stats``, or None."""
    for key in REQUIRED_STATS:
        if key not in stats:
            return key
    return None


def validate_creature(draft: CreatureDraft) -> CreatureRecord:
    """Resolve a draft into a complete record.

    Raises ``ValidationError`` naming the missing attribute and creature.
    """
    missing = find_missing_stat(draft.stats)
    if missing is not None:
        raise ValidationError(missing, draft.name)
    if not draft.types:
        raise ValidationError("type", draft.name, kind="attribute")

    stats = draft.stats
    return CreatureRecord(
        id=draft.id,
        name=draft.name,
        type1=draft.types[0],
        type2=draft.types[1] if len(draft.types) > 1 else None,
        hp=stats["hp"],
        attack=stats["attack"],
        defense=stats["defense"],
        special_attack=stats["special-attack"],
        special_defense=stats["special-defense"],
        speed=stats["speed"],
        artwork_url=draft.artwork_url,
    )
