"""Naming helpers.

Centralizes identifier normalization and display-name formatting.
"""

from __future__ import annotations

from typing import Optional


def normalize_name(name: str) -> str:
    """Case-fold a creature or type name for storage and lookup."""
    return name.strip().lower()


def parse_numeric_id(identifier: str) -> Optional[int]:
    """Return the numeric id for a decimal identifier, else ``None``.

    ``"025"`` and ``" 25 "`` both resolve to 25; signs and separators are
    treated as names.
    """
    value = identifier.strip()
    if value and value.isdecimal():
        return int(value)
    return None


def display_name(slug: str) -> str:
    """Convert a PokéAPI slug (kebab-case) to a title-cased display name.

    Single-letter tokens are uppercased (``porygon-z`` -> ``Porygon Z``).
    """
    tokens = slug.replace("-", " ").split()
    return " ".join(
        token.upper() if len(token) == 1 else token[:1].upper() + token[1:]
        for token in tokens
    )
