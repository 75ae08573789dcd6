"""Default configuration values for nativesearch."""

# Indexer defaults
DEFAULT_INDEXER_CONFIG: dict[str, str | int] = {
    "site_dir": "./build/site",
    "output_dir": "./search-data",
    "base_url": "https://docs.magnolia-cms.com",
    "max_chunk_tokens": 1500,
    "workers": 1,
}

# Query engine defaults
DEFAULT_SEARCH_CONFIG: dict[str, str | int | float] = {
    "index_url": "/search-data/search-index.min.json",
    "min_query_length": 2,
    "max_results": 20,
    "fuzzy_threshold": 0.4,  # 0 = exact, 1 = very fuzzy
    "fuzzy_min_length": 4,
    "fuzzy_max_length_diff": 2,
    "timeout": 10.0,  # seconds
}

DEFAULT_FIELD_WEIGHTS: dict[str, float] = {
    "title": 10,
    "heading": 8,
    "content": 3,
    "breadcrumb": 2,
}

# Assistant / context assembly defaults
DEFAULT_ASSISTANT_CONFIG: dict[str, str | int | float | None] = {
    "chunks_url": "/search-data/llm-chunks.json",
    "api_endpoint": "/api/ask",
    "provider": "anthropic",
    "max_context_chunks": 5,
    "max_context_tokens": 8000,
    "min_relevance_score": 0.3,
    "max_answer_tokens": 1024,
    "timeout": 60.0,  # seconds
}

# Direct provider endpoints (development use only)
PROVIDER_DEFAULTS: dict[str, dict[str, str]] = {
    "anthropic": {
        "url": "https://api.anthropic.com/v1/messages",
        "model": "claude-sonnet-4-20250514",
        "api_version": "2023-06-01",
    },
    "openai": {
        "url": "https://api.openai.com/v1/chat/completions",
        "model": "gpt-4-turbo-preview",
    },
}

# Config file names searched in the working directory, in preference order
CONFIG_FILE_NAMES: tuple[str, ...] = ("nativesearch.yml", "nativesearch.yaml")

# Environment variable overrides: dotted config path -> variable name
ENV_VAR_MAP: dict[str, str] = {
    "indexer.site_dir": "NATIVESEARCH_SITE_DIR",
    "indexer.output_dir": "NATIVESEARCH_OUTPUT_DIR",
    "indexer.base_url": "NATIVESEARCH_BASE_URL",
    "indexer.max_chunk_tokens": "NATIVESEARCH_MAX_CHUNK_TOKENS",
    "indexer.workers": "NATIVESEARCH_WORKERS",
    "search.index_url": "NATIVESEARCH_INDEX_URL",
    "assistant.chunks_url": "NATIVESEARCH_CHUNKS_URL",
    "assistant.api_endpoint": "NATIVESEARCH_API_ENDPOINT",
    "assistant.api_key": "NATIVESEARCH_API_KEY",
    "assistant.provider": "NATIVESEARCH_PROVIDER",
    "assistant.model": "NATIVESEARCH_MODEL",
}
