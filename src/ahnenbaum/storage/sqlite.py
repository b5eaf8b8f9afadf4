"""SQLite-backed person/relationship store."""
from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models.date import GenealogyDate
from ..models.person import Person, PersonEvent, PersonName, utcnow
from ..models.relationship import Relationship, RelationshipType
from .base import RelationshipQuery, RelationshipStore

# Stay well below SQLITE_MAX_VARIABLE_NUMBER on older builds
_IN_CHUNK = 500


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _parse_ts(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def _date_json(value: GenealogyDate | None) -> str | None:
    return value.to_json() if value else None


def _parse_date(value: str | None) -> GenealogyDate | None:
    return GenealogyDate.model_validate_json(value) if value else None


def _chunks(ids: list[str]) -> Iterator[list[str]]:
    for start in range(0, len(ids), _IN_CHUNK):
        yield ids[start:start + _IN_CHUNK]


class SQLiteStore(RelationshipStore):
    """SQLite storage for persons, names, events and relationship edges.

    Uniqueness of live edges per unordered pair and type is enforced by
    the relationship service, not by the schema: soft-deleted rows must not
    block re-creation.
    """

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @contextmanager
    def _get_conn(self):
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        # Enforce PRAGMAs per-connection
        conn.execute("PRAGMA foreign_keys=ON;")
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        try:
            yield conn
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self._get_conn() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS persons (
                    id TEXT PRIMARY KEY,
                    sex TEXT NOT NULL DEFAULT 'unknown',
                    privacy TEXT NOT NULL DEFAULT 'public',
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    deleted_at TEXT
                );

                CREATE TABLE IF NOT EXISTS person_names (
                    id TEXT PRIMARY KEY,
                    person_id TEXT NOT NULL,
                    given TEXT NOT NULL DEFAULT '',
                    surname TEXT NOT NULL DEFAULT '',
                    type TEXT NOT NULL DEFAULT 'birth',
                    is_preferred INTEGER NOT NULL DEFAULT 1,
                    FOREIGN KEY (person_id) REFERENCES persons(id)
                );
                CREATE INDEX IF NOT EXISTS idx_person_names_person ON person_names(person_id);
                CREATE INDEX IF NOT EXISTS idx_person_names_surname ON person_names(surname);

                CREATE TABLE IF NOT EXISTS events (
                    id TEXT PRIMARY KEY,
                    person_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    date TEXT,
                    place TEXT,
                    deleted_at TEXT,
                    FOREIGN KEY (person_id) REFERENCES persons(id)
                );
                CREATE INDEX IF NOT EXISTS idx_events_person ON events(person_id);

                CREATE TABLE IF NOT EXISTS relationships (
                    id TEXT PRIMARY KEY,
                    person_a_id TEXT NOT NULL,
                    person_b_id TEXT NOT NULL,
                    type TEXT NOT NULL,
                    start_date TEXT,
                    end_date TEXT,
                    place_id TEXT,
                    notes TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    deleted_at TEXT,
                    FOREIGN KEY (person_a_id) REFERENCES persons(id),
                    FOREIGN KEY (person_b_id) REFERENCES persons(id)
                );
                CREATE INDEX IF NOT EXISTS idx_relationships_person_a ON relationships(person_a_id);
                CREATE INDEX IF NOT EXISTS idx_relationships_person_b ON relationships(person_b_id);
                """
            )
            conn.commit()

    # ----------------------------- Row mapping -----------------------------

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> Person:
        return Person(
            id=row["id"],
            sex=row["sex"],
            privacy=row["privacy"],
            notes=row["notes"],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
            deleted_at=_parse_ts(row["deleted_at"]),
        )

    @staticmethod
    def _row_to_relationship(row: sqlite3.Row) -> Relationship:
        return Relationship(
            id=row["id"],
            person_a_id=row["person_a_id"],
            person_b_id=row["person_b_id"],
            type=RelationshipType(row["type"]),
            start_date=_parse_date(row["start_date"]),
            end_date=_parse_date(row["end_date"]),
            place_id=row["place_id"],
            notes=row["notes"],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
            deleted_at=_parse_ts(row["deleted_at"]),
        )

    def _select_in(
        self, table: str, column: str, ids: Iterable[str], extra_where: str = ""
    ) -> list[sqlite3.Row]:
        id_list = list(dict.fromkeys(ids))
        if not id_list:
            return []
        rows: list[sqlite3.Row] = []
        with self._get_conn() as conn:
            for chunk in _chunks(id_list):
                placeholders = ",".join("?" for _ in chunk)
                rows.extend(
                    conn.execute(
                        f"SELECT rowid AS _rowid, * FROM {table} "
                        f"WHERE {column} IN ({placeholders}) {extra_where}",
                        chunk,
                    ).fetchall()
                )
        rows.sort(key=lambda r: r["_rowid"])
        return rows

    # ------------------------------- Persons -------------------------------

    def add_person(self, person: Person) -> Person:
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO persons (id, sex, privacy, notes, created_at, updated_at, deleted_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    person.id,
                    person.sex.value,
                    person.privacy.value,
                    person.notes,
                    _ts(person.created_at),
                    _ts(person.updated_at),
                    _ts(person.deleted_at),
                ),
            )
            conn.commit()
        return person

    def get_person(self, person_id: str) -> Person | None:
        with self._get_conn() as conn:
            row = conn.execute("SELECT * FROM persons WHERE id = ?", (person_id,)).fetchone()
            return self._row_to_person(row) if row else None

    def get_persons(self, person_ids: Iterable[str]) -> list[Person]:
        return [self._row_to_person(r) for r in self._select_in("persons", "id", person_ids)]

    def list_persons(self, include_deleted: bool = False) -> list[Person]:
        where = "" if include_deleted else "WHERE deleted_at IS NULL"
        with self._get_conn() as conn:
            rows = conn.execute(f"SELECT * FROM persons {where} ORDER BY rowid").fetchall()
            return [self._row_to_person(r) for r in rows]

    def soft_delete_person(self, person_id: str) -> bool:
        now = _ts(utcnow())
        with self._get_conn() as conn:
            cur = conn.execute(
                "UPDATE persons SET deleted_at = ?, updated_at = ? WHERE id = ? AND deleted_at IS NULL",
                (now, now, person_id),
            )
            conn.commit()
            return cur.rowcount > 0

    def add_name(self, name: PersonName) -> PersonName:
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO person_names (id, person_id, given, surname, type, is_preferred)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (name.id, name.person_id, name.given, name.surname, name.type.value, int(name.is_preferred)),
            )
            conn.commit()
        return name

    def get_names(self, person_ids: Iterable[str] | None = None) -> list[PersonName]:
        if person_ids is None:
            with self._get_conn() as conn:
                rows = conn.execute("SELECT * FROM person_names ORDER BY rowid").fetchall()
        else:
            rows = self._select_in("person_names", "person_id", person_ids)
        return [
            PersonName(
                id=r["id"],
                person_id=r["person_id"],
                given=r["given"],
                surname=r["surname"],
                type=r["type"],
                is_preferred=bool(r["is_preferred"]),
            )
            for r in rows
        ]

    def add_event(self, event: PersonEvent) -> PersonEvent:
        with self._get_conn() as conn:
            conn.execute(
                "INSERT INTO events (id, person_id, type, date, place, deleted_at) VALUES (?, ?, ?, ?, ?, ?)",
                (event.id, event.person_id, event.type, event.date, event.place, _ts(event.deleted_at)),
            )
            conn.commit()
        return event

    def get_events(self, person_ids: Iterable[str] | None = None) -> list[PersonEvent]:
        if person_ids is None:
            with self._get_conn() as conn:
                rows = conn.execute(
                    "SELECT * FROM events WHERE deleted_at IS NULL ORDER BY rowid"
                ).fetchall()
        else:
            rows = self._select_in("events", "person_id", person_ids, "AND deleted_at IS NULL")
        return [
            PersonEvent(
                id=r["id"],
                person_id=r["person_id"],
                type=r["type"],
                date=r["date"],
                place=r["place"],
            )
            for r in rows
        ]

    # ---------------------------- Relationships ----------------------------

    def insert_relationship(self, rel: Relationship) -> Relationship:
        with self._get_conn() as conn:
            conn.execute(
                """
                INSERT INTO relationships (
                    id, person_a_id, person_b_id, type, start_date, end_date,
                    place_id, notes, created_at, updated_at, deleted_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    rel.id,
                    rel.person_a_id,
                    rel.person_b_id,
                    rel.type.value,
                    _date_json(rel.start_date),
                    _date_json(rel.end_date),
                    rel.place_id,
                    rel.notes,
                    _ts(rel.created_at),
                    _ts(rel.updated_at),
                    _ts(rel.deleted_at),
                ),
            )
            conn.commit()
        return rel

    def update_relationship(self, rel: Relationship) -> Relationship:
        with self._get_conn() as conn:
            cur = conn.execute(
                """
                UPDATE relationships SET
                    person_a_id = ?, person_b_id = ?, type = ?, start_date = ?,
                    end_date = ?, place_id = ?, notes = ?, updated_at = ?, deleted_at = ?
                WHERE id = ?
                """,
                (
                    rel.person_a_id,
                    rel.person_b_id,
                    rel.type.value,
                    _date_json(rel.start_date),
                    _date_json(rel.end_date),
                    rel.place_id,
                    rel.notes,
                    _ts(rel.updated_at),
                    _ts(rel.deleted_at),
                    rel.id,
                ),
            )
            conn.commit()
            if cur.rowcount == 0:
                raise KeyError(rel.id)
        return rel

    def get_relationship(self, rel_id: str) -> Relationship | None:
        with self._get_conn() as conn:
            row = conn.execute("SELECT * FROM relationships WHERE id = ?", (rel_id,)).fetchone()
            return self._row_to_relationship(row) if row else None

    @staticmethod
    def _where(query: RelationshipQuery) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if not query.include_deleted:
            clauses.append("deleted_at IS NULL")
        if query.types:
            clauses.append(f"type IN ({','.join('?' for _ in query.types)})")
            params.extend(sorted(t.value for t in query.types))
        for column, ids in (("person_a_id", query.person_a_ids), ("person_b_id", query.person_b_ids)):
            if ids:
                clauses.append(f"{column} IN ({','.join('?' for _ in ids)})")
                params.extend(sorted(ids))
        if query.touching_ids:
            marks = ",".join("?" for _ in query.touching_ids)
            clauses.append(f"(person_a_id IN ({marks}) OR person_b_id IN ({marks}))")
            ordered = sorted(query.touching_ids)
            params.extend(ordered + ordered)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        return where, params

    def _needs_chunking(self, query: RelationshipQuery) -> bool:
        return (
            len(query.person_a_ids) + len(query.person_b_ids) + 2 * len(query.touching_ids)
            > _IN_CHUNK
        )

    def find_relationships(self, query: RelationshipQuery) -> list[Relationship]:
        if self._needs_chunking(query):
            # Large id sets: filter in memory over the live edge table
            broad = RelationshipQuery(types=query.types, include_deleted=query.include_deleted)
            matched = [r for r in self.find_relationships(broad) if query.matches(r)]
            end = None if query.limit is None else query.offset + query.limit
            return matched[query.offset:end]

        where, params = self._where(query)
        sql = f"SELECT * FROM relationships {where} ORDER BY rowid"
        if query.limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params.extend([query.limit, query.offset])
        elif query.offset:
            sql += " LIMIT -1 OFFSET ?"
            params.append(query.offset)
        with self._get_conn() as conn:
            return [self._row_to_relationship(r) for r in conn.execute(sql, params).fetchall()]

    def count_relationships(self, query: RelationshipQuery) -> int:
        if self._needs_chunking(query):
            unpaged = RelationshipQuery(
                person_a_ids=query.person_a_ids,
                person_b_ids=query.person_b_ids,
                touching_ids=query.touching_ids,
                types=query.types,
                include_deleted=query.include_deleted,
            )
            return len(self.find_relationships(unpaged))
        where, params = self._where(query)
        with self._get_conn() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM relationships {where}", params).fetchone()[0]
