"""Keyword-overlap retrieval of LLM chunks for question answering.

Each chunk gets a keyword profile (its 50 most frequent non-stopword terms)
at load time. Questions are profiled the same way and chunks are ranked by a
Jaccard-like overlap score with title and prefix bonuses. The top chunks are
packed into a single context string under a token budget.
"""

import re
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import requests
from pydantic import ValidationError

from nativesearch.lib.errors import ConfigurationError, LoadError
from nativesearch.lib.json_source import load_json_array
from nativesearch.lib.logging_config import get_logger
from nativesearch.models.config import AssistantConfig
from nativesearch.models.records import LlmChunk

logger = get_logger(__name__)

STOPWORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
        "be", "have", "has", "had", "do", "does", "did", "will", "would",
        "could", "should", "may", "might", "must", "can", "this", "that",
        "these", "those", "it", "its", "you", "your", "we", "our", "they",
        "their", "which", "what", "who", "when", "where", "how", "all",
        "each", "every", "both", "few", "more", "most", "other", "some",
        "such", "no", "not", "only", "same", "so", "than", "too", "very",
    }
)  # fmt: skip

MIN_KEYWORD_LENGTH = 3
MAX_KEYWORDS = 50

TITLE_QUESTION_BONUS = 50
TITLE_KEYWORD_BONUS = 5
PREFIX_MATCH_WEIGHT = 0.5
SHORT_CHUNK_TOKENS = 500
SHORT_CHUNK_BOOST = 1.1

CONTEXT_SEPARATOR = "\n\n---\n\n"

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")


def extract_keywords(text: str) -> list[str]:
    """Return up to 50 keywords of a lowercase text, most frequent first.

    Words shorter than 3 characters and stopwords are dropped. Words with
    equal frequency keep their first-seen order.

    Example:
        >>> extract_keywords("how do i configure the dam module? dam config")
        ['dam', 'configure', 'module', 'config']
    """
    words = [
        word
        for word in _NON_ALNUM.sub(" ", text).split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOPWORDS
    ]
    return [word for word, _ in Counter(words).most_common(MAX_KEYWORDS)]


def calculate_similarity(
    query_keywords: list[str],
    chunk_keywords: list[str],
    chunk: LlmChunk,
    question: str,
) -> float:
    """Score how well a chunk matches a question.

    Args:
        query_keywords: Keywords of the question
        chunk_keywords: Keyword profile of the chunk
        chunk: The chunk being scored
        question: Raw question text

    Returns:
        Similarity score (0 means no overlap)
    """
    title = chunk.title.lower()
    score = 0.0

    if question.lower() in title:
        score += TITLE_QUESTION_BONUS

    chunk_set = set(chunk_keywords)
    match_count = 0.0
    for keyword in query_keywords:
        if keyword in chunk_set:
            match_count += 1
            if keyword in title:
                score += TITLE_KEYWORD_BONUS
        for candidate in chunk_keywords:
            if candidate.startswith(keyword) or keyword.startswith(candidate):
                match_count += PREFIX_MATCH_WEIGHT

    union = len(set(query_keywords) | chunk_set)
    if union:
        score += match_count / union * 100

    if chunk.token_estimate < SHORT_CHUNK_TOKENS:
        score *= SHORT_CHUNK_BOOST

    return score


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk with its relevance score for one question."""

    chunk: LlmChunk
    score: float


@dataclass
class AssembledContext:
    """Context text packed from the relevant chunks.

    Attributes:
        context: Chunk contents separated by ``---`` rules
        token_estimate: Sum of the included chunks' token estimates
        sources: ``{title, url}`` for every selected chunk
    """

    context: str
    token_estimate: int
    sources: list[dict[str, str]] = field(default_factory=list)


class ContextAssembler:
    """Selects and packs LLM chunks relevant to a question."""

    def __init__(
        self,
        config: AssistantConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or AssistantConfig()
        self._session = session
        self._chunks: list[LlmChunk] = []
        self._keywords: list[list[str]] = []
        self.loaded = False

    @property
    def chunks(self) -> list[LlmChunk]:
        return self._chunks

    def load(self, source: str | None = None) -> None:
        """Fetch chunks and build their keyword profiles.

        Does nothing when chunks are already loaded.

        Raises:
            LoadError: If the chunk file cannot be fetched or parsed
        """
        if self.loaded:
            return

        source = source or self.config.chunks_url
        data = load_json_array(source, session=self._session, timeout=self.config.timeout)
        try:
            chunks = [LlmChunk.model_validate(item) for item in data]
        except ValidationError as e:
            raise LoadError(source, f"Invalid chunk: {e}") from e

        self.load_chunks(chunks)
        logger.info(f"Loaded {len(chunks)} chunks from {source}")

    def load_chunks(self, chunks: Iterable[LlmChunk | dict[str, Any]]) -> None:
        """Load already-parsed chunks, replacing any previous set."""
        self._chunks = [
            c if isinstance(c, LlmChunk) else LlmChunk.model_validate(c)
            for c in chunks
        ]
        self._keywords = [
            extract_keywords(f"{chunk.title} {chunk.content}".lower())
            for chunk in self._chunks
        ]
        self.loaded = True

    def find_relevant_chunks(
        self,
        question: str,
        max_chunks: int | None = None,
        version: str | None = None,
        category: str | None = None,
    ) -> list[ScoredChunk]:
        """Rank loaded chunks against a question.

        Args:
            question: Raw question text
            max_chunks: Overrides ``config.max_context_chunks``
            version: Only consider chunks with this version
            category: Only consider chunks with this category

        Returns:
            Up to max_chunks chunks scoring at least ``min_relevance_score``,
            best first; ties keep chunk order

        Raises:
            ConfigurationError: If no chunks have been loaded
        """
        if not self.loaded:
            raise ConfigurationError("Chunks not loaded")

        limit = max_chunks or self.config.max_context_chunks
        query_keywords = extract_keywords(question.lower())

        scored: list[ScoredChunk] = []
        for chunk, chunk_keywords in zip(self._chunks, self._keywords, strict=True):
            if version and chunk.version != version:
                continue
            if category and chunk.category != category:
                continue
            score = calculate_similarity(query_keywords, chunk_keywords, chunk, question)
            scored.append(ScoredChunk(chunk, score))

        scored.sort(key=lambda s: s.score, reverse=True)
        relevant = [s for s in scored if s.score >= self.config.min_relevance_score]
        return relevant[:limit]

    def build_context(self, relevant: list[ScoredChunk]) -> AssembledContext:
        """Pack ranked chunks into one context string under the token budget."""
        parts: list[str] = []
        total_tokens = 0

        for item in relevant:
            if total_tokens + item.chunk.token_estimate > self.config.max_context_tokens:
                break
            parts.append(CONTEXT_SEPARATOR + item.chunk.content)
            total_tokens += item.chunk.token_estimate

        return AssembledContext(
            context="".join(parts).strip(),
            token_estimate=total_tokens,
            sources=[{"title": s.chunk.title, "url": s.chunk.url} for s in relevant],
        )
