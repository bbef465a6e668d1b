"""Composable SQL for note search.

Each optional stage (text filter, tag filter, limit) contributes its own
predicate and parameters, so the four filter combinations stay easy to
inspect in isolation.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

from memotori.data.tags import normalize_tags

_FTS_SPECIAL_RE = re.compile(r'["\^*()\[\]{}:]')


def sanitize_fts_query(query: str) -> str:
    """Turn free user text into an FTS5 expression of quoted tokens.

    Every word is wrapped in double quotes so FTS5 operators typed by the
    user are matched literally instead of being parsed. Words with no
    letter or digit are dropped. Returns an empty string when nothing
    searchable remains.
    """
    cleaned = _FTS_SPECIAL_RE.sub(" ", query)
    words = [w for w in cleaned.split() if any(ch.isalnum() for ch in w)]
    return " ".join(f'"{w}"' for w in words)


class SearchQuery:
    def __init__(self, text: str = "", tags: Iterable[str] = (), limit: int = 50) -> None:
        self.text = text.strip()
        self.tags = normalize_tags(tags)
        self.limit = max(0, int(limit))

    @property
    def match_expression(self) -> str:
        return sanitize_fts_query(self.text) if self.text else ""

    @property
    def has_text_filter(self) -> bool:
        return bool(self.text)

    @property
    def has_tag_filter(self) -> bool:
        return bool(self.tags)

    def _text_stage(self) -> tuple[str, str, list[Any]]:
        """Return (join, predicate, params) for the full-text filter."""
        if not self.has_text_filter:
            return "", "", []
        return (
            "JOIN notes_fts ON notes_fts.note_id = n.id",
            "notes_fts MATCH ?",
            [self.match_expression],
        )

    def _tag_stage(self) -> tuple[str, list[Any]]:
        """Return (predicate, params) requiring every requested tag."""
        if not self.has_tag_filter:
            return "", []
        placeholders = ", ".join(["?"] * len(self.tags))
        predicate = f"""n.id IN (
                SELECT nt.note_id
                FROM notes_tags nt
                JOIN tags t ON t.id = nt.tag_id
                WHERE t.name IN ({placeholders})
                GROUP BY nt.note_id
                HAVING COUNT(DISTINCT t.name) = ?
            )"""
        return predicate, [*self.tags, len(self.tags)]

    def build(self) -> tuple[str, list[Any]]:
        """Compose the final statement and its positional parameters."""
        text_join, text_pred, text_params = self._text_stage()
        tag_pred, tag_params = self._tag_stage()

        predicates = ["n.deleted_at IS NULL"]
        if text_pred:
            predicates.append(text_pred)
        if tag_pred:
            predicates.append(tag_pred)

        order = ["n.updated_at DESC", "n.rowid DESC"]
        if self.has_text_filter:
            order.insert(0, "bm25(notes_fts)")

        sql = "\n".join(
            part
            for part in (
                "SELECT n.id, n.content",
                "FROM notes n",
                text_join,
                "WHERE " + "\n  AND ".join(predicates),
                "ORDER BY " + ", ".join(order),
                "LIMIT ?",
            )
            if part
        )
        return sql, [*text_params, *tag_params, self.limit]
