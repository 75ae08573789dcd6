"""Configuration models for the indexer, query engine and assistant.

Each component receives its own config object at construction time, so
several engines with different tuning can coexist in one process.
"""

from pydantic import BaseModel, ConfigDict, Field

from nativesearch.config.defaults import (
    DEFAULT_ASSISTANT_CONFIG,
    DEFAULT_FIELD_WEIGHTS,
    DEFAULT_INDEXER_CONFIG,
    DEFAULT_SEARCH_CONFIG,
)


class FieldWeights(BaseModel):
    """Per-field score added when a query token occurs in that field."""

    model_config = ConfigDict(extra="forbid")

    title: float = Field(DEFAULT_FIELD_WEIGHTS["title"], ge=0)
    heading: float = Field(DEFAULT_FIELD_WEIGHTS["heading"], ge=0)
    content: float = Field(DEFAULT_FIELD_WEIGHTS["content"], ge=0)
    breadcrumb: float = Field(DEFAULT_FIELD_WEIGHTS["breadcrumb"], ge=0)


class IndexerConfig(BaseModel):
    """Settings for building the search index and LLM chunks."""

    model_config = ConfigDict(extra="forbid")

    site_dir: str = Field(
        DEFAULT_INDEXER_CONFIG["site_dir"],
        description="Directory containing the built static HTML site",
    )
    output_dir: str = Field(
        DEFAULT_INDEXER_CONFIG["output_dir"],
        description="Directory that receives the JSON artifacts",
    )
    base_url: str = Field(
        DEFAULT_INDEXER_CONFIG["base_url"],
        description="Public site URL prepended to every page path",
    )
    max_chunk_tokens: int = Field(
        DEFAULT_INDEXER_CONFIG["max_chunk_tokens"],
        gt=0,
        description="Estimated token budget per LLM chunk",
    )
    workers: int = Field(
        DEFAULT_INDEXER_CONFIG["workers"],
        ge=1,
        description="Parallel extraction threads (1 = sequential)",
    )


class SearchConfig(BaseModel):
    """Tuning for candidate expansion and relevance scoring."""

    model_config = ConfigDict(extra="forbid")

    index_url: str = Field(
        DEFAULT_SEARCH_CONFIG["index_url"],
        description="URL or path of search-index.min.json",
    )
    min_query_length: int = Field(DEFAULT_SEARCH_CONFIG["min_query_length"], ge=1)
    max_results: int = Field(DEFAULT_SEARCH_CONFIG["max_results"], ge=1)
    fuzzy_threshold: float = Field(
        DEFAULT_SEARCH_CONFIG["fuzzy_threshold"],
        ge=0.0,
        le=1.0,
        description="0 = exact only, 1 = anything goes",
    )
    fuzzy_min_length: int = Field(DEFAULT_SEARCH_CONFIG["fuzzy_min_length"], ge=1)
    fuzzy_max_length_diff: int = Field(
        DEFAULT_SEARCH_CONFIG["fuzzy_max_length_diff"], ge=0
    )
    field_weights: FieldWeights = Field(default_factory=FieldWeights)
    timeout: float = Field(
        DEFAULT_SEARCH_CONFIG["timeout"], gt=0, description="HTTP timeout (s)"
    )


class AssistantConfig(BaseModel):
    """Retrieval limits and LLM endpoint settings for question answering."""

    model_config = ConfigDict(extra="forbid")

    chunks_url: str = Field(
        DEFAULT_ASSISTANT_CONFIG["chunks_url"],
        description="URL or path of llm-chunks.json",
    )
    api_endpoint: str | None = Field(
        DEFAULT_ASSISTANT_CONFIG["api_endpoint"],
        description="Backend that answers {question, context, sources}",
    )
    api_key: str | None = Field(
        None, description="Provider API key for direct calls (development only)"
    )
    provider: str = Field(
        DEFAULT_ASSISTANT_CONFIG["provider"],
        description="LLM provider for direct calls: anthropic or openai",
    )
    model: str | None = Field(None, description="Overrides the provider default")
    max_context_chunks: int = Field(
        DEFAULT_ASSISTANT_CONFIG["max_context_chunks"], ge=1
    )
    max_context_tokens: int = Field(
        DEFAULT_ASSISTANT_CONFIG["max_context_tokens"], ge=1
    )
    min_relevance_score: float = Field(
        DEFAULT_ASSISTANT_CONFIG["min_relevance_score"], ge=0.0
    )
    max_answer_tokens: int = Field(DEFAULT_ASSISTANT_CONFIG["max_answer_tokens"], ge=1)
    timeout: float = Field(DEFAULT_ASSISTANT_CONFIG["timeout"], gt=0)


class NativeSearchConfig(BaseModel):
    """Top-level configuration file model (nativesearch.yml)."""

    model_config = ConfigDict(extra="forbid")

    indexer: IndexerConfig = Field(default_factory=IndexerConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
