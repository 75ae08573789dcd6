"""Entry point for the nativesearch command-line tool."""

import click

from nativesearch import __version__
from nativesearch.cli.commands.ask import ask
from nativesearch.cli.commands.index import index
from nativesearch.cli.commands.search import search
from nativesearch.lib.logging_config import setup_logging


@click.group()
@click.version_option(__version__, prog_name="nativesearch")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to nativesearch.yml (default: ./nativesearch.yml if present)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose output with debug information",
)
@click.option(
    "--quiet",
    "-q",
    is_flag=True,
    help="Only show warnings and errors",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None, verbose: bool, quiet: bool) -> None:
    """Build and query client-side documentation search indexes.

    \b
    EXAMPLES:

        Index a built site:
            nativesearch index build/site search-data

        Search the index:
            nativesearch search "install cli" --index search-data/search-index.min.json

        Assemble context for a question:
            nativesearch ask "How do I configure DAM?" --context-only
    """
    setup_logging(verbose=verbose, quiet=quiet)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(index)
main.add_command(search)
main.add_command(ask)


if __name__ == "__main__":
    main()
