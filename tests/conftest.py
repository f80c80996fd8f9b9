import random
import threading

import pytest

from pokecatalog.errors import TransientFetchError
from pokecatalog.store import CatalogStore
from pokecatalog.transform import build_creature_draft, build_move_detail

DEFAULT_STATS = {
    "hp": 78,
    "attack": 84,
    "defense": 78,
    "special-attack": 109,
    "special-defense": 85,
    "speed": 100,
}


class NoShuffle(random.Random):
    """Random source whose shuffle keeps the provider order."""

    def shuffle(self, x, *args, **kwargs):
        return None


class FakeProvider:
    """In-memory stand-in for ProviderClient that records every call."""

    def __init__(self):
        self.creatures = {}
        self.moves = {}
        self.creature_calls = []
        self.move_calls = []
        self._lock = threading.Lock()

    def add_creature(self, payload):
        self.creatures[str(payload["id"])] = payload
        self.creatures[payload["name"].lower()] = payload

    def add_move(self, payload):
        self.moves[payload["id"]] = payload

    def fetch_creature(self, identifier):
        with self._lock:
            self.creature_calls.append(identifier)
        payload = self.creatures.get(str(identifier).lower())
        if payload is None:
            raise TransientFetchError(f"fake://pokemon/{identifier}", "HTTP 404", 404)
        draft = build_creature_draft(payload)
        if draft is None:
            raise TransientFetchError(f"fake://pokemon/{identifier}", "malformed creature payload")
        return draft

    def fetch_move(self, move_id):
        with self._lock:
            self.move_calls.append(move_id)
        payload = self.moves.get(move_id)
        if payload is None:
            raise TransientFetchError(f"fake://move/{move_id}", "HTTP 404", 404)
        detail = build_move_detail(payload)
        if detail is None:
            raise TransientFetchError(f"fake://move/{move_id}", "malformed move payload")
        return detail


def _move_url(move_id):
    return f"https://pokeapi.co/api/v2/move/{move_id}/"


@pytest.fixture
def creature_payload():
    def _make(creature_id, name, types, move_ids=(), stats=None, missing=None, artwork=None):
        stats = dict(DEFAULT_STATS if stats is None else stats)
        if missing is not None:
            stats.pop(missing)
        return {
            "id": creature_id,
            "name": name,
            "types": [
                {"slot": slot, "type": {"name": t, "url": f"https://pokeapi.co/api/v2/type/{t}/"}}
                for slot, t in enumerate(types, start=1)
            ],
            # Provider order is not guaranteed; list the stats backwards.
            "stats": [
                {"base_stat": value, "effort": 0, "stat": {"name": key}}
                for key, value in reversed(list(stats.items()))
            ],
            "moves": [
                {"move": {"name": f"move-{mid}", "url": _move_url(mid)}, "version_group_details": []}
                for mid in move_ids
            ],
            "sprites": {
                "front_default": None,
                "other": {"official-artwork": {"front_default": artwork}},
            },
        }

    return _make


@pytest.fixture
def move_payload():
    def _make(move_id, type_name, power=60, damage_class="physical", name=None, flavor=None):
        return {
            "id": move_id,
            "name": name or f"move-{move_id}",
            "power": power,
            "damage_class": {"name": damage_class},
            "type": {"name": type_name},
            "flavor_text_entries": flavor or [],
        }

    return _make


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def store(tmp_path):
    catalog = CatalogStore(f"sqlite:///{tmp_path / 'catalog.db'}")
    yield catalog
    catalog.close()


@pytest.fixture
def no_shuffle():
    return NoShuffle()
