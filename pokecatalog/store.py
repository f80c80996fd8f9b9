"""Catalog store backed by SQLAlchemy.

The store is the single source of truth: there is no in-process cache above
it. Uniqueness is enforced by primary keys, and every insert runs in its own
short transaction so that concurrent synchronizations converge: a duplicate
insert surfaces as ``PersistenceConflict`` and leaves the existing row alone.
"""

from __future__ import annotations

import logging
import os
import threading
from contextlib import contextmanager, nullcontext
from typing import Any, ContextManager, Dict, Iterator, List, Optional, Tuple

from sqlalchemy import ForeignKey, Integer, String, Text, create_engine, select
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from .errors import NotFound, PersistenceConflict
from .models import CreatureRecord, MoveRecord
from .naming import normalize_name

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


class CreatureRow(Base):
    __tablename__ = "creatures"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)

    type1: Mapped[str] = mapped_column(String(20), nullable=False)
    type2: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    # Base stats
    hp: Mapped[int] = mapped_column(Integer, nullable=False)
    attack: Mapped[int] = mapped_column(Integer, nullable=False)
    defense: Mapped[int] = mapped_column(Integer, nullable=False)
    special_attack: Mapped[int] = mapped_column(Integer, nullable=False)
    special_defense: Mapped[int] = mapped_column(Integer, nullable=False)
    speed: Mapped[int] = mapped_column(Integer, nullable=False)

    artwork_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class MoveRow(Base):
    __tablename__ = "moves"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    power: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class CreatureMoveRow(Base):
    __tablename__ = "creature_moves"

    creature_id: Mapped[int] = mapped_column(ForeignKey("creatures.id"), primary_key=True)
    move_id: Mapped[int] = mapped_column(ForeignKey("moves.id"), primary_key=True)
    # Position in the selected move list (0-3)
    slot: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


def _creature_from_row(row: CreatureRow) -> CreatureRecord:
    return CreatureRecord(
        id=row.id,
        name=row.name,
        type1=row.type1,
        type2=row.type2,
        hp=row.hp,
        attack=row.attack,
        defense=row.defense,
        special_attack=row.special_attack,
        special_defense=row.special_defense,
        speed=row.speed,
        artwork_url=row.artwork_url,
    )


def _move_from_row(row: MoveRow) -> MoveRecord:
    return MoveRecord(
        id=row.id,
        name=row.name,
        type=row.type,
        power=row.power,
        description=row.description,
    )


def _engine_kwargs(database_url: str) -> Dict[str, Any]:
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite"):
        return {}
    kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if url.database in (None, "", ":memory:"):
        # An in-memory database lives on a single connection, which
        # CatalogStore serializes access to
        kwargs["poolclass"] = StaticPool
    else:
        directory = os.path.dirname(url.database)
        if directory:
            os.makedirs(directory, exist_ok=True)
    return kwargs


class CatalogStore:
    """Persistence interface for creatures, moves and creature-move links.

    Lookups raise ``NotFound`` on a miss; inserts raise
    ``PersistenceConflict`` when the key already exists. Any other
    ``SQLAlchemyError`` propagates unchanged.

    Safe to share between threads. With an in-memory SQLite database every
    session runs on the one pooled connection, so sessions are serialized
    behind a lock; file and server databases get a connection per session.
    """

    def __init__(self, database_url: str = "sqlite://", *, engine: Optional[Engine] = None) -> None:
        if engine is None:
            engine = create_engine(database_url, **_engine_kwargs(database_url))
        self.engine = engine
        self._lock: ContextManager[Any] = (
            threading.RLock() if isinstance(engine.pool, StaticPool) else nullcontext()
        )
        with self._lock:
            Base.metadata.create_all(engine)
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)

    def close(self) -> None:
        """Release pooled connections. An in-memory database is discarded."""
        self.engine.dispose()

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock:
            with self._sessions() as session:
                yield session

    def _insert(self, row: Base, table: str, key: object) -> None:
        with self._session() as session:
            session.add(row)
            try:
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise PersistenceConflict(table, key) from exc

    # Creatures

    def get_creature_by_id(self, creature_id: int) -> CreatureRecord:
        """Return the creature stored under ``creature_id`` or raise ``NotFound``."""
        with self._session() as session:
            row = session.get(CreatureRow, creature_id)
            if row is None:
                raise NotFound("creature", creature_id)
            return _creature_from_row(row)

    def get_creature_by_name(self, name: str) -> CreatureRecord:
        """Return the creature whose normalized name matches ``name``.

        Names are compared after trimming and lowercasing, so ``" Pikachu"``
        finds ``pikachu``. Raises ``NotFound`` on a miss.
        """
        key = normalize_name(name)
        with self._session() as session:
            row = session.scalars(select(CreatureRow).where(CreatureRow.name == key)).first()
            if row is None:
                raise NotFound("creature", key)
            return _creature_from_row(row)

    def creature_exists(self, creature_id: int) -> bool:
        with self._session() as session:
            return session.get(CreatureRow, creature_id) is not None

    def insert_creature(self, record: CreatureRecord) -> None:
        """Insert ``record``; raises ``PersistenceConflict`` if its id or name is taken."""
        row = CreatureRow(
            id=record.id,
            name=normalize_name(record.name),
            type1=normalize_name(record.type1),
            type2=normalize_name(record.type2) if record.type2 else None,
            hp=record.hp,
            attack=record.attack,
            defense=record.defense,
            special_attack=record.special_attack,
            special_defense=record.special_defense,
            speed=record.speed,
            artwork_url=record.artwork_url,
        )
        self._insert(row, "creatures", record.id)

    def iter_creatures(self) -> List[CreatureRecord]:
        """Return every stored creature ordered by id."""
        with self._session() as session:
            rows = session.scalars(select(CreatureRow).order_by(CreatureRow.id)).all()
            return [_creature_from_row(row) for row in rows]

    # Moves

    def get_move(self, move_id: int) -> MoveRecord:
        """Return the stored move or raise ``NotFound``."""
        with self._session() as session:
            row = session.get(MoveRow, move_id)
            if row is None:
                raise NotFound("move", move_id)
            return _move_from_row(row)

    def insert_move(self, record: MoveRecord) -> None:
        """Insert a qualifying move. Raises ``PersistenceConflict`` on a duplicate id."""
        row = MoveRow(
            id=record.id,
            name=record.name,
            type=normalize_name(record.type),
            power=record.power,
            description=record.description,
        )
        self._insert(row, "moves", record.id)

    def iter_moves(self) -> List[MoveRecord]:
        with self._session() as session:
            rows = session.scalars(select(MoveRow).order_by(MoveRow.id)).all()
            return [_move_from_row(row) for row in rows]

    # Links

    def insert_link(self, creature_id: int, move_id: int, slot: int = 0) -> None:
        """Link a stored move to a stored creature.

        ``slot`` is the position in the selected move list. A second link for
        the same pair raises ``PersistenceConflict``.
        """
        row = CreatureMoveRow(creature_id=creature_id, move_id=move_id, slot=slot)
        self._insert(row, "creature_moves", (creature_id, move_id))

    def list_creature_moves(self, creature_id: int) -> List[MoveRecord]:
        """Return the moves linked to ``creature_id`` in selection order."""
        stmt = (
            select(MoveRow)
            .join(CreatureMoveRow, CreatureMoveRow.move_id == MoveRow.id)
            .where(CreatureMoveRow.creature_id == creature_id)
            .order_by(CreatureMoveRow.slot, MoveRow.id)
        )
        with self._session() as session:
            return [_move_from_row(row) for row in session.scalars(stmt).all()]

    def iter_links(self) -> List[Tuple[int, int, int]]:
        """Return all ``(creature_id, move_id, slot)`` links."""
        stmt = select(CreatureMoveRow).order_by(
            CreatureMoveRow.creature_id, CreatureMoveRow.slot
        )
        with self._session() as session:
            return [(row.creature_id, row.move_id, row.slot) for row in session.scalars(stmt).all()]
