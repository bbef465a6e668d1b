from __future__ import annotations

import logging
import sqlite3
import time
import uuid
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from memotori.data.errors import ClockError, InitFailed, QueryFailed, WriteFailed
from memotori.data.schema import FTS_SQL, SCHEMA_SQL
from memotori.data.search import SearchQuery
from memotori.data.tags import normalize_tag, normalize_tags

logger = logging.getLogger(__name__)

DEFAULT_QUERY_TIMEOUT = 2.0

# Number of SQLite VM steps between two deadline checks.
_PROGRESS_STEPS = 1000


class NoteListItem(BaseModel):
    id: str
    preview: str


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class NoteStore:
    """Note persistence, tagging and full-text search over one SQLite file.

    Every mutating operation runs in a single ``BEGIN IMMEDIATE``
    transaction and is rolled back as a whole on failure. Reads never open
    a transaction and see the last committed state.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        db_path: str,
        clock: Callable[[], float] | None = None,
        query_timeout: float | None = DEFAULT_QUERY_TIMEOUT,
    ) -> None:
        self._conn = conn
        self._conn.row_factory = sqlite3.Row
        self._db_path = db_path
        self._clock = clock or time.time
        self._query_timeout = query_timeout

    @classmethod
    def open(
        cls,
        path: str | Path,
        clock: Callable[[], float] | None = None,
        query_timeout: float | None = DEFAULT_QUERY_TIMEOUT,
    ) -> NoteStore:
        """Open (creating if absent) the database at *path* and apply the schema."""
        db_path = str(path)
        try:
            # Autocommit mode: the store issues BEGIN/COMMIT itself.
            conn = sqlite3.connect(db_path, isolation_level=None)
        except sqlite3.Error as exc:
            raise InitFailed(f"failed to open sqlite database {db_path}: {exc}") from exc

        try:
            cls._init_schema(conn)
        except sqlite3.Error as exc:
            conn.close()
            raise InitFailed(
                f"failed to initialize sqlite schema in {db_path}: {exc}"
            ) from exc

        logger.debug("Opened note store at %s", db_path)
        return cls(conn, db_path, clock=clock, query_timeout=query_timeout)

    @staticmethod
    def _init_schema(conn: sqlite3.Connection) -> None:
        """Apply the schema. Safe to run against an initialized file."""
        conn.executescript(SCHEMA_SQL)
        row = conn.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = 'notes_fts'"
        ).fetchone()
        conn.executescript(FTS_SQL)
        if row is None:
            logger.info("Full-text index created")
        else:
            logger.debug("Full-text index already exists")

    @property
    def db_path(self) -> str:
        return self._db_path

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> NoteStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # -- internals -----------------------------------------------------------

    def _now(self) -> int:
        try:
            value = self._clock()
        except (OSError, OverflowError, ValueError) as exc:
            raise ClockError(f"system clock is unavailable: {exc}") from exc
        if value < 0:
            raise ClockError("system clock is before unix epoch")
        return int(value)

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """Run the body atomically; any failure rolls everything back."""
        try:
            self._conn.execute("BEGIN IMMEDIATE")
        except sqlite3.Error as exc:
            raise WriteFailed(f"failed to start {action} transaction: {exc}") from exc
        try:
            yield self._conn
            self._conn.execute("COMMIT")
        except sqlite3.Error as exc:
            self._rollback()
            raise WriteFailed(f"failed to {action}: {exc}") from exc
        except BaseException:
            self._rollback()
            raise

    @contextmanager
    def _deadline(self) -> Iterator[None]:
        """Interrupt a read that runs longer than the query timeout."""
        if self._query_timeout is None:
            yield
            return
        expires = time.monotonic() + self._query_timeout
        self._conn.set_progress_handler(
            lambda: int(time.monotonic() > expires), _PROGRESS_STEPS
        )
        try:
            yield
        finally:
            self._conn.set_progress_handler(None, 0)

    def _fetch(self, action: str, sql: str, params: Iterable[Any]) -> list[sqlite3.Row]:
        try:
            with self._deadline():
                return self._conn.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as exc:
            raise QueryFailed(f"failed to {action}: {exc}") from exc

    def _is_live(self, note_id: str) -> bool:
        row = self._conn.execute(
            "SELECT 1 FROM notes WHERE id = ? AND deleted_at IS NULL", (note_id,)
        ).fetchone()
        return row is not None

    def _ensure_tag_links(self, note_id: str, normalized_tags: list[str]) -> None:
        """Upsert each tag by name and link it to *note_id*.

        Must run inside a write transaction; *normalized_tags* must already
        be normalized and deduplicated.
        """
        for tag in normalized_tags:
            self._conn.execute("INSERT OR IGNORE INTO tags (name) VALUES (?)", (tag,))
            self._conn.execute(
                """
                INSERT INTO notes_tags (note_id, tag_id)
                SELECT ?, id FROM tags WHERE name = ?
                """,
                (note_id, tag),
            )

    # -- writes --------------------------------------------------------------

    def insert_note(self, content: str, tags: Iterable[str] = ()) -> str:
        """Create a note and return its id.

        *content* is stored verbatim; an empty body is accepted here.
        """
        note_id = str(uuid.uuid4())
        now = self._now()
        normalized = normalize_tags(tags)

        with self._transaction("insert note") as conn:
            conn.execute(
                """
                INSERT INTO notes (id, content, created_at, updated_at, pinned)
                VALUES (?, ?, ?, ?, 0)
                """,
                (note_id, content, now, now),
            )
            conn.execute(
                "INSERT INTO notes_fts (note_id, content) VALUES (?, ?)",
                (note_id, content),
            )
            self._ensure_tag_links(note_id, normalized)

        logger.debug("Inserted note %s with %d tag(s)", note_id, len(normalized))
        return note_id

    def update_note_content(self, note_id: str, content: str) -> None:
        """Rewrite a live note's content and its index row.

        Unknown or soft-deleted ids are silently left alone.
        """
        now = self._now()

        with self._transaction("update note") as conn:
            cur = conn.execute(
                """
                UPDATE notes
                SET content = ?, updated_at = MAX(created_at, ?)
                WHERE id = ? AND deleted_at IS NULL
                """,
                (content, now, note_id),
            )
            if cur.rowcount == 0:
                logger.debug("No live note %s to update", note_id)
                return
            conn.execute("DELETE FROM notes_fts WHERE note_id = ?", (note_id,))
            conn.execute(
                "INSERT INTO notes_fts (note_id, content) VALUES (?, ?)",
                (note_id, content),
            )

        logger.debug("Updated content of note %s", note_id)

    def replace_note_tags(self, note_id: str, tags: Iterable[str]) -> None:
        """Swap the whole tag set of a live note. No-op for unknown ids."""
        normalized = normalize_tags(tags)

        with self._transaction("replace note tags") as conn:
            if not self._is_live(note_id):
                logger.debug("No live note %s to tag", note_id)
                return
            conn.execute("DELETE FROM notes_tags WHERE note_id = ?", (note_id,))
            self._ensure_tag_links(note_id, normalized)

        logger.debug("Replaced tags of note %s with %d tag(s)", note_id, len(normalized))

    # -- reads ---------------------------------------------------------------

    def search_notes(
        self, query: str = "", tags: Iterable[str] = (), limit: int = 50
    ) -> list[NoteListItem]:
        """Search live notes.

        Without query text, results are ordered by most recently updated.
        With query text, by BM25 relevance first. When *tags* are given,
        only notes carrying every one of them are returned.
        """
        search = SearchQuery(query, tags, limit)
        if search.limit == 0:
            return []
        if search.has_text_filter and not search.match_expression:
            return []

        sql, params = search.build()
        rows = self._fetch("search notes", sql, params)
        return [NoteListItem(id=row["id"], preview=row["content"]) for row in rows]

    def get_note_content(self, note_id: str) -> str | None:
        rows = self._fetch(
            "look up note",
            "SELECT content FROM notes WHERE id = ? AND deleted_at IS NULL",
            (note_id,),
        )
        return str(rows[0]["content"]) if rows else None

    def get_note_tags(self, note_id: str) -> list[str]:
        rows = self._fetch(
            "list note tags",
            """
            SELECT t.name
            FROM notes_tags nt
            JOIN tags t ON t.id = nt.tag_id
            JOIN notes n ON n.id = nt.note_id
            WHERE nt.note_id = ? AND n.deleted_at IS NULL
            ORDER BY t.name ASC
            """,
            (note_id,),
        )
        return [row["name"] for row in rows]

    def list_tags_prefix(self, prefix: str, limit: int = 8) -> list[str]:
        """Return tag names starting with *prefix*, for autocomplete.

        An empty prefix returns nothing rather than every tag.
        """
        prefix = normalize_tag(prefix)
        limit = max(0, int(limit))
        if not prefix or limit == 0:
            return []

        rows = self._fetch(
            "list tags by prefix",
            """
            SELECT name
            FROM tags
            WHERE name LIKE ? || '%' ESCAPE '\\'
            ORDER BY name ASC
            LIMIT ?
            """,
            (_escape_like(prefix), limit),
        )
        return [row["name"] for row in rows]
