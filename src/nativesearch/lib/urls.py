"""URL helpers shared by every indexing pipeline.

Category and version classification lives here and only here, so a page gets
exactly one category/version assignment across the search records and the LLM
chunks derived from it.
"""

import hashlib
import re

# Ordered (substrings, category, version); first match wins.
CATEGORY_RULES: list[tuple[tuple[str, ...], str, str]] = [
    (("/product-docs/6.2/",), "Magnolia 6.2", "6.2"),
    (("/product-docs/6.3/",), "Magnolia 6.3", "6.3"),
    (("/product-docs/",), "Magnolia 6.4", "latest"),
    (("/paas/", "/cockpit/"), "DX Cloud", "cloud"),
    (("/support/",), "Support", "general"),
    (("/magnolia-cli/",), "CLI", "general"),
    (("/headless/",), "Headless", "general"),
]

DEFAULT_CATEGORY = "Modules"
DEFAULT_VERSION = "modules"

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


def categorize_url(url: str) -> tuple[str, str]:
    """Classify a page URL into a (category, version) pair.

    Args:
        url: Full page URL

    Returns:
        Tuple of (category, version)

    Example:
        >>> categorize_url("https://docs.example.com/product-docs/6.2/intro/")
        ('Magnolia 6.2', '6.2')
        >>> categorize_url("https://docs.example.com/dam-module/")
        ('Modules', 'modules')
    """
    for patterns, category, version in CATEGORY_RULES:
        if any(pattern in url for pattern in patterns):
            return category, version
    return DEFAULT_CATEGORY, DEFAULT_VERSION


def slugify(text: str) -> str:
    """Create a URL-safe anchor slug.

    Example:
        >>> slugify("  Installing the CLI (v4)! ")
        'installing-the-cli-v4'
    """
    return _SLUG_PATTERN.sub("-", text.lower()).strip("-")


def path_to_url(relative_path: str, base_url: str) -> str:
    """Convert a site-relative HTML file path to its public URL.

    ``index.html`` maps to its directory and ``page.html`` to ``page/``.

    Example:
        >>> path_to_url("product-docs/6.3/index.html", "https://docs.example.com")
        'https://docs.example.com/product-docs/6.3/'
    """
    url = relative_path.replace("\\", "/")
    url = re.sub(r"index\.html$", "", url)
    url = re.sub(r"\.html$", "/", url)
    if not url.endswith("/"):
        url += "/"
    if not url.startswith("/"):
        url = "/" + url
    return base_url + url


def content_hash(value: str, length: int = 12) -> str:
    """Return the truncated MD5 hex digest used for record and chunk ids."""
    return hashlib.md5(value.encode("utf-8")).hexdigest()[:length]
