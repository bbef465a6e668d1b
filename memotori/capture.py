"""Helpers used by the capture and library views around the note store.

None of these touch the database directly except :func:`tag_suggestions`,
which goes through :meth:`NoteStore.list_tags_prefix`.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import TYPE_CHECKING

from memotori.data.tags import normalize_tag, normalize_tags

if TYPE_CHECKING:
    from memotori.data.store import NoteStore

TITLE_MAX_CHARS = 60
EMPTY_TITLE = "(empty note)"
FALLBACK_HINT = "L'idee que je viens d'avoir :"
SUGGESTION_LIMIT = 8


def note_title(content: str) -> str:
    """Derive a one-line title from a note preview."""
    for line in content.splitlines():
        title = line.strip()[:TITLE_MAX_CHARS]
        if title:
            return title
    return EMPTY_TITLE


def parse_tags(text: str) -> list[str]:
    """Split comma-separated tag input into normalized names."""
    return normalize_tags(text.split(","))


def current_tag_fragment(text: str) -> str:
    """Return the tag being typed, i.e. whatever follows the last comma."""
    return normalize_tag(text.rsplit(",", 1)[-1])


def apply_tag_completion(text: str, completion: str) -> str:
    """Replace the fragment being typed with *completion*.

    >>> apply_tag_completion("home, err", "errand")
    'home, errand, '
    """
    parts = [part.strip() for part in text.split(",")]
    parts[-1] = completion
    return ", ".join(part for part in parts if part) + ", "


def tag_suggestions(store: NoteStore, text: str, limit: int = SUGGESTION_LIMIT) -> list[str]:
    """Autocomplete candidates for the fragment at the end of *text*.

    A suggestion identical to the fragment itself is left out.
    """
    fragment = current_tag_fragment(text)
    if not fragment:
        return []
    return [tag for tag in store.list_tags_prefix(fragment, limit) if tag != fragment]


def pick_hint(hints: Sequence[str], rng: random.Random | None = None) -> str:
    if not hints:
        return FALLBACK_HINT
    if len(hints) == 1:
        return hints[0]
    return (rng or random).choice(list(hints))
