"""Error taxonomy for catalog synchronization.

- ``NotFound``: storage miss; drives the fetch path
- ``ValidationError``: provider payload missing a required attribute
- ``TransientFetchError``: network/timeout/non-2xx/decode failure
- ``PersistenceConflict``: unique-key collision on insert (benign)
"""

from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""


class NotFound(CatalogError):
    """Raised by the store when a lookup matches no row."""

    def __init__(self, kind: str, key: object) -> None:
        super().__init__(f"{kind} not found: {key!r}")
        self.kind = kind
        self.key = key


class SyncError(CatalogError):
    """A single synchronization attempt failed."""


class ValidationError(SyncError):
    """A creature payload lacks a required stat or attribute.

    ``kind`` is ``"stat"`` for the six base stats and ``"attribute"`` for
    anything else (such as the type list).
    """

    def __init__(self, attribute: str, creature: str, kind: str = "stat") -> None:
        super().__init__(f"missing {kind} '{attribute}' for creature '{creature}'")
        self.attribute = attribute
        self.creature = creature
        self.kind = kind


class TransientFetchError(SyncError):
    """Provider call failed; the caller may retry later."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        super().__init__(f"failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.status_code = status_code


class PersistenceConflict(CatalogError):
    def __init__(self, table: str, key: object) -> None:
        super().__init__(f"{table} already contains {key!r}")
        self.table = table
        self.key = key
