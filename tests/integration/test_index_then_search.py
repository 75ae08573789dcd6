"""End-to-end tests: index a site, then search and assemble context from it."""

from pathlib import Path

import pytest

pytestmark = pytest.mark.integration


@pytest.fixture
def artifacts(site_dir: Path, temp_dir: Path) -> Path:
    """Run the indexer over the sample site and return the output directory."""
    from nativesearch.lib.indexer import SiteIndexer
    from nativesearch.models.config import IndexerConfig

    out = temp_dir / "search-data"
    SiteIndexer(
        IndexerConfig(
            site_dir=str(site_dir),
            output_dir=str(out),
            base_url="https://docs.example.com",
        )
    ).run()
    return out


class TestIndexThenSearch:
    """Tests for the query engine over freshly built artifacts."""

    def test_search_finds_section(self, artifacts: Path) -> None:
        """Test a section heading query ranks that section first."""
        from nativesearch.lib.query_engine import QueryEngine

        engine = QueryEngine(index_url=str(artifacts / "search-index.min.json"))
        engine.load()

        results = engine.search("prerequisites")

        assert results[0].record.heading == "Prerequisites"
        assert results[0].record.url.endswith("/magnolia-cli/install/#prerequisites")

    def test_typo_tolerance(self, artifacts: Path) -> None:
        """Test a misspelled term still finds the page."""
        from nativesearch.lib.query_engine import QueryEngine

        engine = QueryEngine(index_url=str(artifacts / "search-index.min.json"))
        engine.load()

        results = engine.search("magnolai")

        assert results

    def test_categories_and_versions(self, artifacts: Path) -> None:
        """Test filters reflect the indexed pages."""
        from nativesearch.lib.query_engine import QueryEngine

        engine = QueryEngine(index_url=str(artifacts / "search-index.min.json"))
        engine.load()

        assert engine.get_categories() == ["CLI", "Magnolia 6.3", "Modules"]
        assert engine.get_versions() == ["6.3", "general", "modules"]

    def test_search_is_deterministic(self, artifacts: Path) -> None:
        """Test repeated queries return identical rankings."""
        from nativesearch.lib.query_engine import QueryEngine

        engine = QueryEngine(index_url=str(artifacts / "search-index.min.json"))
        engine.load()

        first = [(r.position, r.score) for r in engine.search("modules yaml")]
        second = [(r.position, r.score) for r in engine.search("modules yaml")]

        assert first
        assert first == second


class TestIndexThenAsk:
    """Tests for context assembly over freshly built artifacts."""

    def test_context_for_question(self, artifacts: Path) -> None:
        """Test the DAM chunk is selected and packed into the context."""
        from nativesearch.lib.assistant import DocsAssistant
        from nativesearch.models.config import AssistantConfig

        assistant = DocsAssistant(
            AssistantConfig(
                chunks_url=str(artifacts / "llm-chunks.json"), api_endpoint=None
            )
        )

        result = assistant.ask("How do I configure the DAM module?")

        assert result.answer is None
        assert result.context is not None
        assert "Configure the DAM module with YAML definitions." in result.context
        assert result.sources[0]["url"] == (
            "https://docs.example.com/product-docs/6.3/dam/"
        )
