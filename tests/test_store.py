import threading

import pytest

from pokecatalog.errors import NotFound, PersistenceConflict
from pokecatalog.models import CreatureRecord, MoveRecord
from pokecatalog.store import CatalogStore


def _creature(creature_id=6, name="charizard", type2="flying"):
    return CreatureRecord(
        id=creature_id,
        name=name,
        type1="fire",
        type2=type2,
        hp=78,
        attack=84,
        defense=78,
        special_attack=109,
        special_defense=85,
        speed=100,
    )


def test_lookup_miss_is_not_found(store):
    with pytest.raises(NotFound):
        store.get_creature_by_id(6)
    with pytest.raises(NotFound):
        store.get_creature_by_name("charizard")
    with pytest.raises(NotFound):
        store.get_move(53)
    assert not store.creature_exists(6)


def test_insert_and_lookup_creature(store):
    store.insert_creature(_creature(name="Charizard"))

    by_id = store.get_creature_by_id(6)
    by_name = store.get_creature_by_name("  CHARIZARD ")

    assert by_id == by_name
    assert by_id.name == "charizard"
    assert by_id.types == ("fire", "flying")
    assert store.creature_exists(6)


def test_duplicate_creature_is_conflict_and_keeps_original(store):
    store.insert_creature(_creature())
    with pytest.raises(PersistenceConflict):
        store.insert_creature(_creature(type2=None))

    assert store.get_creature_by_id(6).type2 == "flying"
    assert len(store.iter_creatures()) == 1


def test_duplicate_move_and_link_are_conflicts(store):
    store.insert_creature(_creature())
    store.insert_move(MoveRecord(id=53, name="flamethrower", type="fire", power=90))

    with pytest.raises(PersistenceConflict):
        store.insert_move(MoveRecord(id=53, name="flamethrower", type="fire", power=90))

    store.insert_link(6, 53, 0)
    with pytest.raises(PersistenceConflict):
        store.insert_link(6, 53, 1)

    assert store.iter_links() == [(6, 53, 0)]


def test_creature_moves_follow_slot_order(store):
    store.insert_creature(_creature())
    for move_id, name in ((17, "wing-attack"), (53, "flamethrower"), (52, "ember")):
        store.insert_move(MoveRecord(id=move_id, name=name, type="fire", power=40))
    store.insert_link(6, 53, 0)
    store.insert_link(6, 52, 1)
    store.insert_link(6, 17, 2)

    assert [m.id for m in store.list_creature_moves(6)] == [53, 52, 17]
    assert store.list_creature_moves(999) == []


def test_in_memory_database_is_shared_across_sessions():
    catalog = CatalogStore("sqlite://")
    catalog.insert_creature(_creature())
    assert catalog.get_creature_by_id(6).name == "charizard"
    catalog.close()


def test_file_database_creates_parent_directory(tmp_path):
    path = tmp_path / "nested" / "dir" / "catalog.db"
    catalog = CatalogStore(f"sqlite:///{path}")
    catalog.insert_creature(_creature())
    catalog.close()

    reopened = CatalogStore(f"sqlite:///{path}")
    assert reopened.get_creature_by_id(6).name == "charizard"
    reopened.close()


def test_in_memory_store_survives_concurrent_writers():
    catalog = CatalogStore("sqlite://")
    barrier = threading.Barrier(4)
    conflicts = []
    errors = []

    def worker(offset):
        barrier.wait()
        try:
            for n in range(100):
                creature_id = offset * 1000 + n
                catalog.insert_creature(_creature(creature_id=creature_id, name=f"mon-{creature_id}"))
                try:
                    catalog.insert_creature(_creature(creature_id=creature_id, name=f"mon-{creature_id}"))
                except PersistenceConflict:
                    conflicts.append(creature_id)
                assert catalog.get_creature_by_id(creature_id).name == f"mon-{creature_id}"
        except Exception as exc:  # surfaced through the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(offset,)) for offset in range(1, 5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(conflicts) == 400
    assert len(catalog.iter_creatures()) == 400
    catalog.close()
