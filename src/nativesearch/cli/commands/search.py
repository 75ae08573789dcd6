"""CLI command for querying a built search index."""

import json
import sys

import click

from nativesearch.cli.context import load_cli_config
from nativesearch.lib.errors import ConfigError, LoadError
from nativesearch.lib.logging_config import get_logger
from nativesearch.lib.query_engine import QueryEngine, SearchResult
from nativesearch.lib.ui import ANSIColors, colorize

logger = get_logger(__name__)


def format_result(rank: int, result: SearchResult) -> str:
    """Render one search hit as three terminal lines."""
    record = result.record
    title = record.title
    if record.heading and record.heading != record.title:
        title = f"{title} > {record.heading}"

    header = (
        f"{rank:>2}. "
        + colorize(title, ANSIColors.CYAN)
        + " "
        + colorize(f"[{record.version}] {result.score:.1f}", ANSIColors.GREEN)
    )
    lines = [header, "    " + colorize(record.url, ANSIColors.DIM)]
    if record.content:
        lines.append(f"    {record.content}")
    return "\n".join(lines)


@click.command()
@click.argument("query")
@click.option(
    "--index",
    "index_source",
    default=None,
    help="Path or URL of search-index.min.json",
)
@click.option("--version", "version_filter", default=None, help="Only this version")
@click.option("--category", default=None, help="Only this category")
@click.option(
    "--limit",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum number of results (default: 20)",
)
@click.option("--json", "as_json", is_flag=True, help="Output results as JSON")
@click.pass_context
def search(
    ctx: click.Context,
    query: str,
    index_source: str | None,
    version_filter: str | None,
    category: str | None,
    limit: int | None,
    as_json: bool,
) -> None:
    """Search the documentation index.

    \b
    EXAMPLES:

        nativesearch search "light development" --version 6.3
        nativesearch search dam --index search-data/search-index.min.json --json
    """
    try:
        config = load_cli_config(ctx)
        engine = QueryEngine(config.search, index_url=index_source)
        engine.load()
    except ConfigError as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(2)
    except LoadError as e:
        logger.error(f"Load error: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    results = engine.search(
        query, version=version_filter, category=category, max_results=limit
    )

    if as_json:
        click.echo(
            json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False)
        )
        return

    if not results:
        click.echo("No results found")
        return

    for rank, result in enumerate(results, start=1):
        click.echo(format_result(rank, result))
