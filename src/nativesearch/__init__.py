"""nativesearch - client-side documentation search and retrieval.

Builds a compact inverted-index search file and token-budgeted LLM context
chunks from a static HTML documentation site, and serves both:

- Page extraction into sections with category/version classification
- Budget-aware section chunking for retrieval-augmented answers
- Keyword search with prefix and fuzzy matching and weighted scoring
- Keyword-overlap context assembly for an external LLM
"""

from nativesearch.config.loader import ConfigLoader
from nativesearch.lib.errors import ConfigError, LoadError, NativeSearchError

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConfigLoader",
    "ConfigError",
    "LoadError",
    "NativeSearchError",
]
