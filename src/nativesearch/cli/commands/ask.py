"""CLI command for answering questions from the LLM chunks.

Implements 'nativesearch ask': retrieves the most relevant chunks, then either
calls the configured backend/provider or prints the assembled prompt.
"""

import json
import sys
from typing import Any

import click

from nativesearch.cli.context import load_cli_config, prune_none
from nativesearch.lib.assistant import AskResult, DocsAssistant
from nativesearch.lib.errors import (
    AssistantError,
    ConfigError,
    ConfigurationError,
    LoadError,
)
from nativesearch.lib.logging_config import get_logger
from nativesearch.lib.ui import ANSIColors, colorize

logger = get_logger(__name__)


def format_sources(sources: list[dict[str, str]]) -> str:
    """Render the source list printed after an answer."""
    if not sources:
        return ""
    lines = [colorize("Sources:", ANSIColors.BOLD)]
    for source in sources:
        lines.append(f"  - {source['title']}: " + colorize(source["url"], ANSIColors.DIM))
    return "\n".join(lines)


def _echo_result(result: AskResult) -> None:
    if result.answer is not None:
        click.echo(result.answer)
    else:
        click.echo(colorize("System prompt:", ANSIColors.BOLD))
        click.echo(result.system_prompt or "")
        click.echo()
        click.echo(colorize("Prompt:", ANSIColors.BOLD))
        click.echo(result.prompt or "")

    sources = format_sources(result.sources)
    if sources:
        click.echo()
        click.echo(sources)


def _stream_answer(assistant: DocsAssistant, question: str, **filters: Any) -> None:
    sources: list[dict[str, str]] = []
    with assistant.stream(question, **filters) as stream:
        for event in stream:
            if event.type == "sources":
                sources = event.sources or []
            elif event.type == "text":
                click.echo(event.text, nl=False)
            elif event.type == "done":
                click.echo()

    formatted = format_sources(sources)
    if formatted:
        click.echo()
        click.echo(formatted)


@click.command()
@click.argument("question")
@click.option("--chunks", default=None, help="Path or URL of llm-chunks.json")
@click.option("--endpoint", default=None, help="Answer backend URL")
@click.option(
    "--provider",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="LLM provider for direct calls (needs NATIVESEARCH_API_KEY)",
)
@click.option("--version", "version_filter", default=None, help="Only this version")
@click.option("--category", default=None, help="Only this category")
@click.option(
    "--max-chunks",
    type=click.IntRange(min=1),
    default=None,
    help="Maximum chunks in the context (default: 5)",
)
@click.option(
    "--context-only",
    is_flag=True,
    help="Print the assembled prompt instead of calling an LLM",
)
@click.option("--stream", "use_stream", is_flag=True, help="Stream from ENDPOINT/stream")
@click.option("--json", "as_json", is_flag=True, help="Output the result as JSON")
@click.pass_context
def ask(
    ctx: click.Context,
    question: str,
    chunks: str | None,
    endpoint: str | None,
    provider: str | None,
    version_filter: str | None,
    category: str | None,
    max_chunks: int | None,
    context_only: bool,
    use_stream: bool,
    as_json: bool,
) -> None:
    """Answer QUESTION from the documentation chunks.

    \b
    EXAMPLES:

        nativesearch ask "How do I install the CLI?" --context-only
        nativesearch ask "What is DX Cloud?" --endpoint https://docs.example.com/api/ask
    """
    overrides: dict[str, Any] = prune_none(
        {"chunks_url": chunks, "api_endpoint": endpoint, "provider": provider}
    )
    if context_only:
        overrides["api_endpoint"] = None
        overrides["api_key"] = None

    filters = {
        "version": version_filter,
        "category": category,
        "max_chunks": max_chunks,
    }

    try:
        config = load_cli_config(ctx, {"assistant": overrides})
        assistant = DocsAssistant(config.assistant)

        if use_stream:
            _stream_answer(assistant, question, **filters)
            return

        result = assistant.ask(question, **filters)
    except (ConfigError, ConfigurationError) as e:
        click.echo(f"Configuration Error: {e}", err=True)
        sys.exit(2)
    except (LoadError, AssistantError) as e:
        logger.error(f"Ask failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _echo_result(result)
