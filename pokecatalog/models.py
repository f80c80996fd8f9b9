"""Plain data structures passed between catalog components."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class CreatureRecord:
    id: int
    name: str
    type1: str
    type2: Optional[str]
    hp: int
    attack: int
    defense: int
    special_attack: int
    special_defense: int
    speed: int
    artwork_url: Optional[str] = None

    @property
    def types(self) -> Tuple[str, ...]:
        return (self.type1, self.type2) if self.type2 else (self.type1,)

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "type1": self.type1,
            "type2": self.type2,
            "hp": self.hp,
            "attack": self.attack,
            "defense": self.defense,
            "special_attack": self.special_attack,
            "special_defense": self.special_defense,
            "speed": self.speed,
            "artwork_url": self.artwork_url,
        }


@dataclass(frozen=True)
class MoveRecord:
    id: int
    name: str
    type: str
    power: int
    description: Optional[str] = None

    def as_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "power": self.power,
            "description": self.description,
        }


@dataclass
class CreatureDraft:
    """Decoded creature payload whose stats have not been checked yet.

    ``stats`` may be missing any of the required attributes; only
    ``validate.validate_creature`` turns a draft into a ``CreatureRecord``.
    """

    id: int
    name: str
    types: List[str]
    stats: Dict[str, int]
    move_ids: List[int] = field(default_factory=list)
    artwork_url: Optional[str] = None


@dataclass(frozen=True)
class MoveDetail:
    id: int
    name: str
    type: str
    power: Optional[int]
    damage_class: str
    flavor_text: Optional[str] = None

    @property
    def qualifies(self) -> bool:
        """True for damaging moves with a positive power value."""
        return (
            isinstance(self.power, int)
            and self.power > 0
            and self.damage_class != "status"
        )

    def to_record(self) -> MoveRecord:
        return MoveRecord(
            id=self.id,
            name=self.name,
            type=self.type,
            power=self.power or 0,
            description=self.flavor_text,
        )


@dataclass(frozen=True)
class MoveCandidate:
    move_id: int
    same_type: bool
