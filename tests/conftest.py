"""Pytest configuration and shared fixtures for nativesearch tests."""

import logging
import os
import shutil
import tempfile
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

BASE_URL = "https://docs.example.com"

CLI_PAGE_HTML = """<!DOCTYPE html>
<html>
<head>
  <title>Installing Magnolia CLI :: Magnolia docs</title>
  <meta name="description" content="Explore Magnolia CMS documentation">
</head>
<body>
  <nav class="breadcrumbs"><a href="/">Home</a><a href="/magnolia-cli/">CLI</a></nav>
  <article class="doc">
    <h1 class="page">Installing Magnolia CLI</h1>
    <p>This page explains how to install the Magnolia command line interface.</p>
    <h2 id="prerequisites">Prerequisites</h2>
    <p>You need Java 17 and Maven installed.</p>
    <pre>npm install -g @magnolia/cli</pre>
    <h2>Next Steps</h2>
    <ul><li>Create your first light module today.</li></ul>
    <table>
      <tr><th>Option</th><th>Meaning</th></tr>
      <tr><td>--help</td><td>Show help</td></tr>
    </table>
  </article>
</body>
</html>
"""


def render_page(
    title: str,
    sections: list[tuple[str | None, str]],
    description: str = "",
) -> str:
    """Render a minimal documentation page.

    Args:
        title: Page title (used for <title> and h1.page)
        sections: (h2 heading or None, paragraph text) pairs
        description: Meta description content
    """
    body = [f'<h1 class="page">{title}</h1>']
    for heading, text in sections:
        if heading:
            body.append(f"<h2>{heading}</h2>")
        body.append(f"<p>{text}</p>")
    return (
        f"<html><head><title>{title} :: Docs</title>"
        f'<meta name="description" content="{description}"></head>'
        f'<body><div class="doc">{"".join(body)}</div></body></html>'
    )


@pytest.fixture
def temp_dir() -> Generator[Path]:
    """Create a temporary directory for test file operations.

    Yields:
        Path to temporary directory

    Cleanup:
        Automatically removes directory after test
    """
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def isolated_env() -> Generator[dict[str, str]]:
    """Provide isolated environment variables for testing.

    Yields:
        Dictionary of original environment variables

    Cleanup:
        Restores original environment after test
    """
    original_env = os.environ.copy()
    yield original_env
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture(autouse=True)
def reset_package_logger() -> Generator[None]:
    """Undo setup_logging() side effects so caplog keeps working."""
    yield
    logger = logging.getLogger("nativesearch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def cli_page_html() -> str:
    """HTML of a small, well-formed documentation page."""
    return CLI_PAGE_HTML


@pytest.fixture
def site_dir(temp_dir: Path) -> Path:
    """Build a small static site.

    Layout (walk order):
        404.html                       skipped (placeholder)
        _/hidden.html                  ignored directory
        assets/widget.html             ignored directory
        broken.html                    invalid UTF-8, recorded as an error
        index.html                     Modules page
        magnolia-cli/install.html      CLI page
        product-docs/6.3/dam.html      Magnolia 6.3 page
    """
    site = temp_dir / "site"
    (site / "_").mkdir(parents=True)
    (site / "assets").mkdir()
    (site / "magnolia-cli").mkdir()
    (site / "product-docs" / "6.3").mkdir(parents=True)

    (site / "404.html").write_text(
        "<html><head><title>404 Not Found</title></head><body></body></html>"
    )
    (site / "_" / "hidden.html").write_text(CLI_PAGE_HTML)
    (site / "assets" / "widget.html").write_text(CLI_PAGE_HTML)
    (site / "broken.html").write_bytes(b"<html>\xff\xfe\xfa</html>")
    (site / "index.html").write_text(
        render_page(
            "Modules overview",
            [
                (None, "Modules extend Magnolia with reusable functionality."),
                ("Light modules", "Light modules are defined in YAML files only."),
            ],
        )
    )
    (site / "magnolia-cli" / "install.html").write_text(CLI_PAGE_HTML)
    (site / "product-docs" / "6.3" / "dam.html").write_text(
        render_page(
            "DAM module",
            [
                ("Configuration", "Configure the DAM module with YAML definitions."),
                ("Assets", "The DAM module stores images, videos and documents."),
            ],
            description="Digital asset management in Magnolia.",
        )
    )
    return site


@pytest.fixture
def page_factory() -> Callable[..., str]:
    """Return render_page for tests that build their own pages."""
    return render_page
