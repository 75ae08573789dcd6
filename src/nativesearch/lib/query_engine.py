"""Client-side documentation search over a prebuilt search index.

The QueryEngine loads ``search-index.min.json``, builds an inverted index,
and answers keyword queries with:

- Exact, prefix (both directions) and fuzzy (Levenshtein) candidate expansion
- Weighted multi-field scoring (title, heading, content, breadcrumb)
- Version and category filters
- Deterministic ranking: score descending, then record position ascending

Example:
    >>> engine = QueryEngine(SearchConfig(index_url="search-data/search-index.min.json"))
    >>> engine.load()
    >>> for result in engine.search("install cli", version="latest"):
    ...     print(result.record.title, result.score)
"""

import re
import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

import requests
from opentelemetry import trace
from pydantic import ValidationError

from nativesearch.lib.errors import LoadError
from nativesearch.lib.inverted_index import InvertedIndex, build_inverted_index, tokenize
from nativesearch.lib.json_source import load_json_array
from nativesearch.lib.logging_config import get_logger
from nativesearch.models.config import FieldWeights, SearchConfig
from nativesearch.models.records import SearchRecord

logger = get_logger(__name__)

tracer = trace.get_tracer("nativesearch.query_engine")

FULL_QUERY_TITLE_BONUS = 100
FULL_QUERY_HEADING_BONUS = 80
TITLE_PREFIX_BONUS = 15
OCCURRENCE_BONUS = 0.5
MAX_OCCURRENCE_BONUS = 5
SHORT_TITLE_LENGTH = 30
SHORT_TITLE_BOOST = 1.2
TOP_HEADING_BOOST = 1.1


class EngineState(str, Enum):
    """Lifecycle of a QueryEngine."""

    UNLOADED = "unloaded"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


def levenshtein(a: str, b: str) -> int:
    """Edit distance with unit insert, delete and substitute costs."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            if char_a == char_b:
                current.append(previous[j - 1])
            else:
                current.append(min(previous[j - 1], previous[j], current[j - 1]) + 1)
        previous = current
    return previous[-1]


def fuzzy_match(
    a: str, b: str, threshold: float = 0.4, max_length_diff: int = 2
) -> bool:
    """Return True when two terms are within the fuzzy similarity threshold.

    Pairs whose lengths differ by more than ``max_length_diff`` never match.
    Otherwise similarity is ``1 - distance / max(len)`` and must be at least
    ``1 - threshold``.

    Example:
        >>> fuzzy_match("javaa", "java")
        True
    """
    if abs(len(a) - len(b)) > max_length_diff:
        return False
    max_length = max(len(a), len(b))
    if max_length == 0:
        return True
    similarity = 1 - levenshtein(a, b) / max_length
    return similarity >= 1 - threshold


def score_document(
    record: SearchRecord,
    query_terms: Sequence[str],
    full_query: str,
    weights: FieldWeights,
) -> float:
    """Score a record against a tokenized query.

    Args:
        record: Candidate record
        query_terms: Tokenized query
        full_query: Trimmed, lowercased raw query
        weights: Per-field weights

    Returns:
        Relevance score (higher is better)
    """
    title = record.title.lower()
    heading = (record.heading or "").lower()
    content = (record.full_content or record.content).lower()
    breadcrumb = " ".join(record.breadcrumb).lower()

    score = 0.0
    if full_query in title:
        score += FULL_QUERY_TITLE_BONUS
    if full_query in heading:
        score += FULL_QUERY_HEADING_BONUS

    for term in query_terms:
        if term in title:
            score += weights.title
            if title.startswith(term):
                score += TITLE_PREFIX_BONUS

        if heading and term in heading:
            score += weights.heading

        if term in content:
            score += weights.content
            score += min(content.count(term) * OCCURRENCE_BONUS, MAX_OCCURRENCE_BONUS)

        if term in breadcrumb:
            score += weights.breadcrumb

    if len(title) < SHORT_TITLE_LENGTH:
        score *= SHORT_TITLE_BOOST

    if record.heading_level in (1, 2):
        score *= TOP_HEADING_BOOST

    return score


@dataclass(frozen=True)
class SearchResult:
    """A ranked search hit.

    Attributes:
        record: The matched record (shared, never mutated)
        score: Relevance score
        position: Record position in the loaded index
    """

    record: SearchRecord
    score: float
    position: int

    def to_dict(self) -> dict[str, Any]:
        """Serialize as the record's wire fields plus ``_score``."""
        data = self.record.to_json_dict()
        data["_score"] = self.score
        return data


class QueryEngine:
    """Keyword search engine over a loaded search index.

    Attributes:
        config: Search tuning for this instance
        state: Current lifecycle state
    """

    def __init__(
        self,
        config: SearchConfig | None = None,
        index_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config: Search configuration (defaults when None)
            index_url: Overrides ``config.index_url``
            timeout: Overrides ``config.timeout``
            session: HTTP session for remote indexes
        """
        self.config = config or SearchConfig()
        self.index_url = index_url or self.config.index_url
        self.timeout = timeout if timeout is not None else self.config.timeout
        self._session = session
        self._lock = threading.Lock()
        self._records: list[SearchRecord] = []
        self._index = InvertedIndex()
        self.state = EngineState.UNLOADED

    @property
    def is_ready(self) -> bool:
        """Return True once an index has been loaded."""
        return self.state is EngineState.READY

    @property
    def records(self) -> list[SearchRecord]:
        """Return the loaded records in index order."""
        return self._records

    @property
    def inverted_index(self) -> InvertedIndex:
        """Return the inverted index built at load time."""
        return self._index

    def load(self, source: str | None = None) -> None:
        """Fetch and index the search records.

        Calling load() on a ready engine does nothing.

        Args:
            source: URL or path; defaults to ``index_url``

        Raises:
            LoadError: If the index cannot be fetched or parsed. The engine
                is left in the FAILED state with no records.
        """
        with self._lock:
            if self.state is EngineState.READY:
                return
            self.state = EngineState.LOADING

        source = source or self.index_url
        try:
            data = load_json_array(source, session=self._session, timeout=self.timeout)
            records = self._parse_records(source, data)
        except Exception:
            with self._lock:
                self.state = EngineState.FAILED
            logger.warning(f"Failed to load search index from {source}")
            raise

        self._install(records)

    def load_records(self, records: Iterable[SearchRecord | dict[str, Any]]) -> None:
        """Load already-parsed records, replacing any previous index."""
        parsed = [
            r if isinstance(r, SearchRecord) else SearchRecord.model_validate(r)
            for r in records
        ]
        self._install(parsed)

    def _parse_records(self, source: str, data: list[Any]) -> list[SearchRecord]:
        try:
            return [SearchRecord.model_validate(item) for item in data]
        except ValidationError as e:
            raise LoadError(source, f"Invalid search record: {e}") from e

    def _install(self, records: list[SearchRecord]) -> None:
        index = build_inverted_index(records)
        with self._lock:
            self._records = records
            self._index = index
            self.state = EngineState.READY
        logger.debug(
            f"Built inverted index with {len(index)} terms from "
            f"{len(records)} documents"
        )

    def find_candidates(self, query_terms: Sequence[str]) -> list[int]:
        """Return the ascending positions of records matching any query term.

        A record is a candidate when one of its indexed terms equals a query
        term, is a prefix of it or has it as a prefix, or (for query terms of
        ``fuzzy_min_length`` or more) is a fuzzy match.
        """
        config = self.config
        candidates: set[int] = set()

        for term in query_terms:
            candidates.update(self._index.get(term))
            fuzzy_eligible = len(term) >= config.fuzzy_min_length

            for indexed, positions in self._index.items():
                if (
                    indexed.startswith(term)
                    or term.startswith(indexed)
                    or (
                        fuzzy_eligible
                        and fuzzy_match(
                            term,
                            indexed,
                            threshold=config.fuzzy_threshold,
                            max_length_diff=config.fuzzy_max_length_diff,
                        )
                    )
                ):
                    candidates.update(positions)

        return sorted(candidates)

    def search(
        self,
        query: str,
        version: str | None = None,
        category: str | None = None,
        max_results: int | None = None,
    ) -> list[SearchResult]:
        """Search the loaded index.

        Args:
            query: Raw user query
            version: Only return records with this version
            category: Only return records with this category
            max_results: Overrides ``config.max_results``

        Returns:
            Ranked results; empty for short or empty queries, or when the
            engine is not loaded
        """
        if not self.is_ready:
            logger.warning("Search called before the index was loaded")
            return []

        query = (query or "").strip().lower()
        if len(query) < self.config.min_query_length:
            return []

        query_terms = tokenize(query)
        if not query_terms:
            return []

        limit = max_results or self.config.max_results

        with tracer.start_as_current_span(
            "nativesearch.search",
            attributes={
                "search.query_length": len(query),
                "search.query_terms": len(query_terms),
                "search.index_size": len(self._records),
            },
        ) as span:
            scored: list[SearchResult] = []
            for position in self.find_candidates(query_terms):
                record = self._records[position]
                if version and record.version != version:
                    continue
                if category and record.category != category:
                    continue
                score = score_document(
                    record, query_terms, query, self.config.field_weights
                )
                scored.append(SearchResult(record, score, position))

            # Candidates are already in position order and sort() is stable
            scored.sort(key=lambda r: r.score, reverse=True)
            results = scored[:limit]

            span.set_attribute("search.result_count", len(results))
            return results

    def highlight(self, text: str, query: str, tag: str = "mark") -> str:
        """Wrap case-insensitive occurrences of each query token in a tag.

        Example:
            >>> engine.highlight("Install Java first", "java")
            'Install <mark>Java</mark> first'
        """
        if not text or not query:
            return text

        result = text
        for term in tokenize(query):
            pattern = re.compile(f"({re.escape(term)})", re.IGNORECASE)
            result = pattern.sub(rf"<{tag}>\1</{tag}>", result)
        return result

    def get_categories(self) -> list[str]:
        """Return the sorted distinct categories of the loaded records."""
        if not self.is_ready:
            return []
        return sorted({record.category for record in self._records})

    def get_versions(self) -> list[str]:
        """Return the sorted distinct versions of the loaded records."""
        if not self.is_ready:
            return []
        return sorted({record.version for record in self._records})
