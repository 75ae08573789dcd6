"""CLI command for building the search index and LLM chunks.

Implements 'nativesearch index': walks a built HTML site and writes
search-index.json, search-index.min.json, llm-chunks.json and metadata.json.
"""

import sys
import time

import click

from nativesearch.cli.context import load_cli_config, prune_none
from nativesearch.lib.errors import ConfigError
from nativesearch.lib.indexer import IndexResult, SiteIndexer
from nativesearch.lib.logging_config import get_logger
from nativesearch.lib.ui import ANSIColors, colorize

logger = get_logger(__name__)


def format_summary(result: IndexResult, elapsed: float) -> str:
    """Render the end-of-run summary shown on stdout."""
    stats = result.stats
    lines = [
        colorize("Index built", ANSIColors.BOLD) + f" in {elapsed:.1f}s",
        f"  Files processed: {stats.files_processed}",
        f"  Pages skipped:   {stats.pages_skipped}",
        f"  Search records:  {stats.search_records}",
        f"  LLM chunks:      {stats.llm_chunks}",
        f"  Pages split:     {stats.pages_split}",
    ]

    sizes = result.chunk_size_summary()
    if sizes:
        lines.append(f"  Max chunk size:  {sizes['max']} tokens")
        lines.append(f"  Avg chunk size:  {sizes['avg']} tokens")

    if stats.errors:
        lines.append(colorize(f"  Errors:          {len(stats.errors)}", ANSIColors.RED))
    else:
        lines.append(colorize("  No errors", ANSIColors.GREEN))
    return "\n".join(lines)


@click.command()
@click.argument("site_dir", required=False, type=click.Path(file_okay=False))
@click.argument("output_dir", required=False, type=click.Path(file_okay=False))
@click.option("--base-url", default=None, help="Public URL of the documentation site")
@click.option(
    "--max-chunk-tokens",
    type=click.IntRange(min=1),
    default=None,
    help="Estimated token budget per LLM chunk (default: 1500)",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=None,
    help="Parallel extraction threads (default: 1)",
)
@click.pass_context
def index(
    ctx: click.Context,
    site_dir: str | None,
    output_dir: str | None,
    base_url: str | None,
    max_chunk_tokens: int | None,
    workers: int | None,
) -> None:
    """Build search artifacts from a static HTML site.

    SITE_DIR is the built site (default: ./build/site). OUTPUT_DIR receives
    the JSON artifacts (default: ./search-data).
    """
    overrides = prune_none(
        {
            "site_dir": site_dir,
            "output_dir": output_dir,
            "base_url": base_url,
            "max_chunk_tokens": max_chunk_tokens,
            "workers": workers,
        }
    )

    try:
        config = load_cli_config(ctx, {"indexer": overrides} if overrides else None)
        indexer = SiteIndexer(config.indexer)
        logger.info(
            f"Index command invoked: site_dir={indexer.site_dir}, "
            f"output_dir={indexer.output_dir}"
        )

        start_time = time.time()
        result = indexer.run()
        click.echo(format_summary(result, time.time() - start_time))
        click.echo(f"  Output:          {indexer.output_dir}")
    except ConfigError as e:
        logger.error(f"Configuration error: {e}", exc_info=True)
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(2)
    except FileNotFoundError as e:
        logger.error(f"Site directory error: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
