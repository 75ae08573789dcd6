"""Command-line interface for nativesearch."""
