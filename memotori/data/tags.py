from __future__ import annotations

from collections.abc import Iterable


def normalize_tag(name: str) -> str:
    """Trim and lowercase a tag name. May return an empty string."""
    return name.strip().lower()


def normalize_tags(names: Iterable[str]) -> list[str]:
    """Normalize *names*, dropping empties and duplicates.

    The first occurrence of each value wins; tags are unordered so the
    surviving order carries no meaning beyond being stable.
    """
    normalized: list[str] = []
    for name in names:
        clean = normalize_tag(name)
        if clean and clean not in normalized:
            normalized.append(clean)
    return normalized
