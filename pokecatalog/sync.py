"""Catalog synchronizer.

Entry point for the rest of the system. ``resolve`` treats the store as an
authoritative cache in front of PokéAPI:

1. look the creature up in the store (hit -> return, no provider contact)
2. on a miss, fetch the creature payload
3. validate the six base stats
4. insert the creature (a duplicate insert counts as success)
5. select up to four moves and insert the links
6. re-read the stored record and return it

A failure in steps 2-3 persists nothing; retrying is calling ``resolve``
again.
"""

from __future__ import annotations

import logging
import random
from typing import Any, List, Optional

from .config import DEFAULT_MOVE_FETCH_BUDGET, Settings
from .errors import NotFound, PersistenceConflict, SyncError
from .fetch import ProviderClient
from .models import CreatureRecord, MoveRecord
from .naming import normalize_name, parse_numeric_id
from .selection import MoveSelector
from .store import CatalogStore
from .validate import validate_creature

logger = logging.getLogger(__name__)


class CatalogSynchronizer:
    """Resolve creatures through the store, synchronizing from the provider on a miss.

    ``store`` and ``provider`` are duck-typed (``CatalogStore`` and
    ``ProviderClient`` in production). One instance may be shared between
    threads when its store is; concurrent resolves of the same identifier
    converge on a single stored record.
    """

    def __init__(
        self,
        store: Any,
        provider: Any,
        selector: Optional[MoveSelector] = None,
        *,
        fetch_budget: int = DEFAULT_MOVE_FETCH_BUDGET,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.provider = provider
        self.selector = selector or MoveSelector(
            store, provider, fetch_budget=fetch_budget, rng=rng
        )

    @classmethod
    def from_settings(cls, settings: Settings, **kwargs: Any) -> "CatalogSynchronizer":
        """Wire a synchronizer against the configured database and provider."""
        store = CatalogStore(settings.database_url)
        provider = ProviderClient.from_settings(settings)
        return cls(store, provider, fetch_budget=settings.move_fetch_budget, **kwargs)

    def lookup(self, identifier: str) -> CreatureRecord:
        """Store-only lookup by numeric id or case-folded name."""
        numeric_id = parse_numeric_id(identifier)
        if numeric_id is not None:
            return self.store.get_creature_by_id(numeric_id)
        return self.store.get_creature_by_name(identifier)

    def resolve(self, identifier: str) -> CreatureRecord:
        """Return the stored creature, synchronizing it from the provider on a miss.

        Raises ``ValidationError`` or ``TransientFetchError`` when the
        synchronization fails, and ``NotFound`` if the record is still
        missing afterwards.
        """
        try:
            return self.lookup(identifier)
        except NotFound:
            logger.debug("catalog miss for %r; synchronizing", identifier)

        try:
            creature_id = self.synchronize(identifier)
        except SyncError as exc:
            logger.warning("synchronization of %r failed: %s", identifier, exc)
            raise
        return self.store.get_creature_by_id(creature_id)

    def synchronize(self, identifier: str) -> int:
        """Fetch, validate and persist one creature plus its move links.

        Returns the provider-assigned creature id.
        """
        numeric_id = parse_numeric_id(identifier)
        draft = self.provider.fetch_creature(
            numeric_id if numeric_id is not None else normalize_name(identifier)
        )
        record = validate_creature(draft)

        try:
            self.store.insert_creature(record)
        except PersistenceConflict:
            # Another synchronization got there first and owns the move links.
            logger.debug("creature %d already stored", record.id)
            return record.id

        move_ids = self.selector.select(record.types, draft.move_ids)
        for slot, move_id in enumerate(move_ids):
            try:
                self.store.insert_link(record.id, move_id, slot)
            except PersistenceConflict:
                logger.debug("link %d -> %d already stored", record.id, move_id)

        logger.info(
            "synchronized %s (#%d) with %d moves", record.name, record.id, len(move_ids)
        )
        return record.id

    def get_moves(self, identifier: str) -> List[MoveRecord]:
        """Return the selected moves of a creature, resolving it first."""
        record = self.resolve(identifier)
        return self.store.list_creature_moves(record.id)
