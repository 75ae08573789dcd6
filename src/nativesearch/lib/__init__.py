"""Core library: extraction, chunking, indexing, search and retrieval."""
