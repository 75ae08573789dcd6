"""Shared fixtures for CLI command tests."""

from pathlib import Path

import pytest


@pytest.fixture
def built_index(
    site_dir: Path, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
) -> Path:
    """Index the sample site into temp_dir/out and run from temp_dir.

    Returns:
        The output directory holding the JSON artifacts
    """
    from nativesearch.lib.indexer import SiteIndexer
    from nativesearch.models.config import IndexerConfig

    monkeypatch.chdir(temp_dir)
    out = temp_dir / "out"
    indexer = SiteIndexer(
        IndexerConfig(
            site_dir=str(site_dir),
            output_dir=str(out),
            base_url="https://docs.example.com",
        )
    )
    indexer.write_outputs(indexer.build())
    return out
