"""Turn free-text location descriptions into search tokens."""

from __future__ import annotations

import re
from typing import Iterator, Sequence

from dirwise.errors import InvalidArgumentError

STOP_WORDS = frozenset({"the", "my", "folder", "directory", "in", "on", "at", "a", "an"})
_SPLIT = re.compile(r"[\s/\\]+")


class SearchTermSet(Sequence[str]):
    """Immutable, ordered set of lower-case search tokens."""

    __slots__ = ("_terms",)

    def __init__(self, terms: Sequence[str]) -> None:
        self._terms = tuple(dict.fromkeys(term.lower() for term in terms if term))

    def __getitem__(self, index):  # type: ignore[override]
        return self._terms[index]

    def __len__(self) -> int:
        return len(self._terms)

    def __iter__(self) -> Iterator[str]:
        return iter(self._terms)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SearchTermSet):
            return self._terms == other._terms
        if isinstance(other, (tuple, list)):
            return self._terms == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._terms)

    def __repr__(self) -> str:
        return f"SearchTermSet({list(self._terms)!r})"


def extract_terms(description: str) -> SearchTermSet:
    """Return the search tokens for ``description`` with stop-words removed.

    Args:
        description: Free-text location description such as "my downloads folder".

    Returns:
        SearchTermSet: Lower-cased tokens in first-seen order. When every word is a
        stop-word the whole trimmed description becomes the only token.

    Raises:
        InvalidArgumentError: If the description is empty or whitespace.
    """
    if description is None or not description.strip():
        raise InvalidArgumentError("A non-empty description is required.")

    normalized = description.strip().lower()
    tokens = [token for token in _SPLIT.split(normalized) if token and token not in STOP_WORDS]
    if not tokens:
        return SearchTermSet([normalized])
    return SearchTermSet(tokens)


__all__ = ["STOP_WORDS", "SearchTermSet", "extract_terms"]
