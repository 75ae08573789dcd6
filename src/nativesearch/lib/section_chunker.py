"""Token-budgeted grouping of page sections into LLM context chunks.

Each page becomes one or more LlmChunks. Every chunk starts with the same
header block (title, URL, category, version, breadcrumb, summary) followed by
whole sections; sections are never split internally.

Key Features:
- Deterministic heuristic token estimate (no tokenizer model)
- Single-chunk short-circuit for pages within budget
- Greedy left-to-right packing with an oversized-section escape hatch
- Two-phase build: collect chunks, then stamp chunk_total on each

Example:
    >>> chunker = SectionChunker(max_tokens=1500)
    >>> chunks = chunker.chunk_page(page.metadata, page.sections, page.url)
    >>> [c.id for c in chunks]
    ['3f2a9c0d1e4b-0', '3f2a9c0d1e4b-1']
"""

import math
import re
from dataclasses import dataclass, field

from nativesearch.lib.page_extractor import PageMetadata, Section
from nativesearch.lib.urls import content_hash
from nativesearch.models.records import LlmChunk

MAX_CHUNK_TOKENS = 1500

_WHITESPACE = re.compile(r"\s+")
_MARKDOWN_CHARS = re.compile(r"[#*_`\[\]()]")

CODE_MARKER = "[Code]"
TABLE_MARKER = "[Table]"
CODE_MARKER_TOKENS = 50
TABLE_MARKER_TOKENS = 20
MARKDOWN_OVERHEAD = 0.1
FORMATTING_MULTIPLIER = 1.3


def estimate_tokens(text: str) -> int:
    """Estimate the LLM token count of a piece of text.

    words + ceil(10% of markdown punctuation) + 50 per code block marker
    + 20 per table marker, all scaled by 1.3 and rounded up.

    Args:
        text: Text to estimate

    Returns:
        Estimated token count (0 for empty text)

    Example:
        >>> estimate_tokens("You need Java 17 and Maven installed.")
        10
    """
    if not text:
        return 0

    tokens = len([word for word in _WHITESPACE.split(text) if word])
    tokens += math.ceil(len(_MARKDOWN_CHARS.findall(text)) * MARKDOWN_OVERHEAD)
    tokens += text.count(CODE_MARKER) * CODE_MARKER_TOKENS
    tokens += text.count(TABLE_MARKER) * TABLE_MARKER_TOKENS

    return math.ceil(tokens * FORMATTING_MULTIPLIER)


def estimate_section_tokens(section: Section) -> int:
    """Estimate tokens for a section's heading plus its content."""
    tokens = 0
    if section.heading:
        tokens += estimate_tokens(section.heading)
    if section.content:
        tokens += estimate_tokens(section.content)
    return tokens


def build_chunk_header(metadata: PageMetadata, url: str) -> str:
    """Build the header block repeated at the top of every chunk of a page."""
    lines = [
        f"# {metadata.title}",
        "",
        f"URL: {url}",
        f"Category: {metadata.category}",
        f"Version: {metadata.version}",
        f"Path: {' > '.join(metadata.breadcrumb)}" if metadata.breadcrumb else "",
        "",
        f"Summary: {metadata.description}" if metadata.description else "",
        "",
        "---",
        "",
    ]
    return "\n".join(lines)


def build_chunk_content(header: str, sections: list[Section]) -> str:
    """Render the header and sections as markdown-ish chunk text.

    Section headings are demoted one level below the page title, capped at
    ``####``.
    """
    lines = [header]
    for section in sections:
        if section.heading:
            prefix = "#" * min(section.heading_level + 1, 4)
            lines.append(f"{prefix} {section.heading}")
            lines.append("")
        if section.content:
            lines.append(section.content)
            lines.append("")
    return "\n".join(lines).strip()


def describe_section_range(sections: list[Section]) -> str:
    """Human-readable label for the headings a chunk covers."""
    first = sections[0].heading or "Introduction"
    if len(sections) == 1:
        return first
    last = sections[-1].heading or "End"
    return f"{first} ... {last}"


@dataclass
class _PendingChunk:
    """Sections accumulated for the chunk currently being filled."""

    start_index: int
    tokens: int
    sections: list[Section] = field(default_factory=list)


class SectionChunker:
    """Greedy, budget-aware chunker for extracted page sections.

    Attributes:
        max_tokens: Estimated token budget per chunk, header included.
    """

    def __init__(self, max_tokens: int = MAX_CHUNK_TOKENS) -> None:
        """Initialize the chunker.

        Args:
            max_tokens: Token budget per chunk (default 1500)

        Raises:
            ValueError: If max_tokens is not positive
        """
        if max_tokens <= 0:
            raise ValueError("max_tokens must be positive")
        self._max_tokens = max_tokens

    @property
    def max_tokens(self) -> int:
        """Return the per-chunk token budget."""
        return self._max_tokens

    def chunk_page(
        self, metadata: PageMetadata, sections: list[Section], url: str
    ) -> list[LlmChunk]:
        """Group a page's sections into one or more LLM chunks.

        Args:
            metadata: Page metadata (header content and chunk labels)
            sections: Sections in document order
            url: Page URL (also the id seed)

        Returns:
            Chunks in order. A page within budget yields exactly one chunk
            with no chunk_index/chunk_total.
        """
        header = build_chunk_header(metadata, url)
        header_tokens = estimate_tokens(header)
        base_id = content_hash(url)

        section_tokens = [estimate_section_tokens(s) for s in sections]
        if header_tokens + sum(section_tokens) <= self._max_tokens:
            content = build_chunk_content(header, sections)
            return [
                LlmChunk(
                    id=base_id,
                    url=url,
                    title=metadata.title,
                    category=metadata.category,
                    version=metadata.version,
                    content=content,
                    token_estimate=estimate_tokens(content),
                )
            ]

        chunks: list[LlmChunk] = []
        pending = _PendingChunk(start_index=0, tokens=header_tokens)

        for index, (section, tokens) in enumerate(
            zip(sections, section_tokens, strict=True)
        ):
            if pending.tokens + tokens > self._max_tokens and pending.sections:
                chunks.append(
                    self._build_split_chunk(
                        header, pending, index - 1, metadata, url, base_id, len(chunks)
                    )
                )
                pending = _PendingChunk(
                    start_index=index,
                    tokens=header_tokens + tokens,
                    sections=[section],
                )
            else:
                pending.sections.append(section)
                pending.tokens += tokens

        if pending.sections:
            chunks.append(
                self._build_split_chunk(
                    header,
                    pending,
                    len(sections) - 1,
                    metadata,
                    url,
                    base_id,
                    len(chunks),
                )
            )

        # chunk_total is only known once every section has been placed
        for chunk in chunks:
            chunk.chunk_total = len(chunks)

        return chunks

    def _build_split_chunk(
        self,
        header: str,
        pending: _PendingChunk,
        end_index: int,
        metadata: PageMetadata,
        url: str,
        base_id: str,
        chunk_index: int,
    ) -> LlmChunk:
        content = build_chunk_content(header, pending.sections)
        return LlmChunk(
            id=f"{base_id}-{chunk_index}",
            url=url,
            title=metadata.title,
            category=metadata.category,
            version=metadata.version,
            content=content,
            token_estimate=estimate_tokens(content),
            chunk_index=chunk_index,
            section_range=describe_section_range(pending.sections),
            section_start_index=pending.start_index,
            section_end_index=end_index,
        )
