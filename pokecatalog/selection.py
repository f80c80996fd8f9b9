"""Move selection.

Picks up to four moves for a creature from the provider's candidate list,
preferring moves that share one of the creature's types. Cached moves are
classified from the store; uncached ones are fetched from the provider, but
only up to a fixed number of fetches per selection.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Iterable, List, Optional, Sequence, Union

from .config import DEFAULT_MOVE_FETCH_BUDGET
from .errors import NotFound, PersistenceConflict, TransientFetchError
from .models import MoveCandidate
from .naming import normalize_name
from .transform import move_id_from_url

logger = logging.getLogger(__name__)

MAX_MOVES = 4

MoveRef = Union[int, str]


def resolve_move_ref(ref: Any) -> Optional[int]:
    """Return the move id for an int or a move URL; None when malformed."""
    if isinstance(ref, bool):
        return None
    if isinstance(ref, int):
        return ref if ref > 0 else None
    return move_id_from_url(ref)


class MoveSelector:
    """Cost-bounded, type-biased move picker.

    ``rng`` only needs a ``shuffle`` method; pass a seeded ``random.Random``
    (or one whose ``shuffle`` is a no-op) for reproducible output.
    """

    def __init__(
        self,
        store: Any,
        provider: Any,
        *,
        fetch_budget: int = DEFAULT_MOVE_FETCH_BUDGET,
        max_moves: int = MAX_MOVES,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.provider = provider
        self.fetch_budget = fetch_budget
        self.max_moves = max_moves
        self.rng = rng if rng is not None else random.Random()

    def select(self, creature_types: Iterable[str], candidates: Sequence[MoveRef]) -> List[int]:
        types = {normalize_name(t) for t in creature_types if t}
        order = list(candidates)
        self.rng.shuffle(order)

        same_type: List[MoveCandidate] = []
        other: List[MoveCandidate] = []
        seen: set[int] = set()
        fetches = 0

        for ref in order:
            move_id = resolve_move_ref(ref)
            if move_id is None:
                logger.debug("skipping malformed move reference %r", ref)
                continue
            if move_id in seen:
                continue
            seen.add(move_id)

            try:
                cached = self.store.get_move(move_id)
                power, move_type = cached.power, cached.type
            except NotFound:
                if fetches >= self.fetch_budget:
                    logger.debug("move fetch budget spent; skipping move %d", move_id)
                    continue
                fetches += 1
                try:
                    detail = self.provider.fetch_move(move_id)
                except TransientFetchError as exc:
                    logger.info("discarding move %d: %s", move_id, exc)
                    continue
                if not detail.qualifies:
                    continue
                try:
                    self.store.insert_move(detail.to_record())
                except PersistenceConflict:
                    logger.debug("move %d already stored", move_id)
                power, move_type = detail.power or 0, detail.type

            if power <= 0:
                continue

            is_same = normalize_name(move_type) in types
            bucket = same_type if is_same else other
            if len(bucket) < self.max_moves:
                bucket.append(MoveCandidate(move_id=move_id, same_type=is_same))
            if len(same_type) >= self.max_moves:
                break

        selected = [c.move_id for c in (same_type + other)[: self.max_moves]]
        logger.debug(
            "selected %d moves (%d same-type) with %d provider fetches",
            len(selected),
            min(len(same_type), self.max_moves),
            fetches,
        )
        return selected
