"""Inverted index over search records.

Maps each token of a record's ``search_text`` to the ascending list of record
positions containing it. The index is rebuilt in full on every load and is
read-only afterwards.
"""

import re
from collections.abc import Iterable, Iterator, Sequence

from nativesearch.models.records import SearchRecord

MIN_TOKEN_LENGTH = 2

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def tokenize(text: str) -> list[str]:
    """Split text into lowercase alphanumeric tokens of length >= 2.

    Example:
        >>> tokenize("Install the Magnolia-CLI (v4) & Java 17!")
        ['install', 'the', 'magnolia', 'cli', 'v4', 'java', '17']
    """
    normalized = _NON_ALNUM.sub(" ", text.lower())
    return [word for word in normalized.split() if len(word) >= MIN_TOKEN_LENGTH]


class InvertedIndex:
    """Token to record-position postings.

    Terms are kept in first-seen order and each posting list is ascending
    with no duplicates.
    """

    def __init__(self) -> None:
        self._postings: dict[str, list[int]] = {}

    def add(self, position: int, text: str) -> None:
        """Index the tokens of one record.

        Positions must be added in ascending order.
        """
        for token in tokenize(text):
            postings = self._postings.setdefault(token, [])
            if not postings or postings[-1] != position:
                postings.append(position)

    def get(self, term: str) -> list[int]:
        """Return the positions containing ``term`` (empty if unknown)."""
        return self._postings.get(term, [])

    def terms(self) -> Iterator[str]:
        """Iterate indexed terms in first-seen order."""
        return iter(self._postings)

    def items(self) -> Iterable[tuple[str, list[int]]]:
        return self._postings.items()

    def to_dict(self) -> dict[str, list[int]]:
        """Return a copy of the token to positions mapping."""
        return {term: list(positions) for term, positions in self._postings.items()}

    def __contains__(self, term: object) -> bool:
        return term in self._postings

    def __len__(self) -> int:
        return len(self._postings)


def build_inverted_index(records: Sequence[SearchRecord]) -> InvertedIndex:
    """Build an inverted index from records in their stored order."""
    index = InvertedIndex()
    for position, record in enumerate(records):
        index.add(position, record.search_text)
    return index
