"""CLI commands: index, search and ask."""
