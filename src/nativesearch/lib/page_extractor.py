"""HTML page extraction into metadata and hierarchical sections.

Parses one static-site HTML document with BeautifulSoup and produces:

- PageMetadata: title, category/version, breadcrumb and description
- An ordered list of Sections, one per heading (h1-h4) that has content

Content nodes are visited in document order in a single linear pass. Each
heading starts a new section; paragraphs, list items, definition terms,
code blocks and tables append text to the current section.

Pages that are 404s, redirects, or too thin to be useful raise
ExtractionSkip, which callers count rather than report.
"""

from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from nativesearch.lib.errors import ExtractionSkip
from nativesearch.lib.logging_config import get_logger
from nativesearch.lib.urls import categorize_url, slugify

logger = get_logger(__name__)

# Selectors, in priority order, for the page title
TITLE_SELECTORS = ("h1.page", "article h1", ".doc h1", "h1")

# Primary content container (first match in document order)
CONTENT_AREA_SELECTOR = ".doc, .content, article"

# Wider net used only for the minimum-content skip check
SKIP_CHECK_SELECTOR = ".doc, .content, article, main"

BREADCRUMB_SELECTOR = ".breadcrumbs a, .breadcrumb a"

HEADING_TAGS = ("h1", "h2", "h3", "h4")
CONTENT_TAGS = HEADING_TAGS + ("p", "li", "dt", "dd", "pre", "table")

# Site-wide meta descriptions that say nothing about the page itself
GENERIC_DESCRIPTIONS = (
    "explore magnolia cms documentation",
    "comprehensive guides and resources",
)

MIN_CONTENT_LENGTH = 100
MIN_FRAGMENT_LENGTH = 10
MAX_CODE_LENGTH = 200
MAX_TABLE_LENGTH = 300
MAX_DESCRIPTION_LENGTH = 200
PREVIEW_LENGTH = 150


@dataclass
class PageMetadata:
    """Page-level metadata shared by every record and chunk of a page.

    Attributes:
        title: Page title from the first matching heading or <title>
        category: Documentation area from the URL pattern table
        version: Product version bucket from the URL pattern table
        breadcrumb: Breadcrumb link texts in DOM order
        description: Meta description or first paragraph (<= 200 chars)
    """

    title: str
    category: str
    version: str
    breadcrumb: list[str] = field(default_factory=list)
    description: str = ""


@dataclass
class Section:
    """A heading and the content that follows it until the next heading.

    Attributes:
        heading: Heading text, or None for content before the first heading
        heading_level: 1-4 for h1-h4, 0 when there is no heading
        anchor: Heading id attribute or a slug of its text
        content: Content fragments joined with single spaces
        content_preview: First 150 chars of content, '...' when truncated
    """

    heading: str | None
    heading_level: int
    anchor: str
    content: str
    content_preview: str


@dataclass
class Page:
    """Result of extracting one HTML document."""

    url: str
    metadata: PageMetadata
    sections: list[Section] = field(default_factory=list)


@dataclass
class _SectionBuilder:
    """Mutable section state while walking the content area."""

    heading: str | None = None
    heading_level: int = 0
    anchor: str = ""
    content: list[str] = field(default_factory=list)

    def finalize(self) -> Section:
        content_text = " ".join(self.content).strip()
        preview = content_text[:PREVIEW_LENGTH]
        if len(content_text) > PREVIEW_LENGTH:
            preview += "..."
        return Section(
            heading=self.heading,
            heading_level=self.heading_level,
            anchor=self.anchor,
            content=content_text,
            content_preview=preview,
        )


def _text(element: Tag | None) -> str:
    """Return the stripped text of an element, or '' when missing."""
    if element is None:
        return ""
    return element.get_text().strip()


def _page_title_tag(soup: BeautifulSoup) -> str:
    return soup.title.get_text() if soup.title is not None else ""


def should_skip(soup: BeautifulSoup) -> str | None:
    """Decide whether a page should be left out of the index.

    Args:
        soup: Parsed HTML document

    Returns:
        The skip reason, or None if the page should be indexed
    """
    title = _page_title_tag(soup)
    if not title:
        return "missing title"
    if "404" in title or "Redirect" in title:
        return "placeholder page"

    content = "".join(el.get_text() for el in soup.select(SKIP_CHECK_SELECTOR))
    if len(content.strip()) < MIN_CONTENT_LENGTH:
        return "not enough content"

    return None


def _extract_title(soup: BeautifulSoup) -> str:
    for selector in TITLE_SELECTORS:
        title = _text(soup.select_one(selector))
        if title:
            return title
    return _page_title_tag(soup).split("::")[0].strip()


def _is_generic_description(description: str) -> bool:
    lowered = description.lower()
    return any(phrase in lowered for phrase in GENERIC_DESCRIPTIONS)


def extract_metadata(soup: BeautifulSoup, url: str) -> PageMetadata:
    """Extract page-level metadata.

    Args:
        soup: Parsed HTML document
        url: Resolved page URL, used for category/version classification

    Returns:
        PageMetadata for the page
    """
    category, version = categorize_url(url)

    breadcrumb = [
        text for text in (_text(a) for a in soup.select(BREADCRUMB_SELECTOR)) if text
    ]

    meta = soup.select_one('meta[name="description"]')
    meta_description = ""
    if meta is not None:
        meta_description = str(meta.get("content") or "").strip()

    if meta_description and not _is_generic_description(meta_description):
        description = meta_description
    else:
        first_paragraph = _text(soup.select_one(".doc > p"))
        description = first_paragraph[:MAX_DESCRIPTION_LENGTH]

    return PageMetadata(
        title=_extract_title(soup),
        category=category,
        version=version,
        breadcrumb=breadcrumb,
        description=description,
    )


def _render_fragment(element: Tag) -> str:
    """Render a non-heading content node to indexable text."""
    if element.name == "pre":
        return "[Code] " + _text(element)[:MAX_CODE_LENGTH]
    if element.name == "table":
        cells = " | ".join(_text(cell) for cell in element.find_all(["th", "td"]))
        return "[Table] " + cells[:MAX_TABLE_LENGTH]
    return _text(element)


def extract_sections(soup: BeautifulSoup) -> list[Section]:
    """Split the primary content area into heading-delimited sections.

    Args:
        soup: Parsed HTML document

    Returns:
        Sections in document order; sections without content are dropped

    Raises:
        ExtractionSkip: If the page has no primary content container
    """
    content_area = soup.select_one(CONTENT_AREA_SELECTOR)
    if content_area is None:
        raise ExtractionSkip("no content container")

    sections: list[Section] = []
    current = _SectionBuilder()

    for element in content_area.find_all(list(CONTENT_TAGS)):
        if element.name in HEADING_TAGS:
            if current.content:
                sections.append(current.finalize())

            heading_text = _text(element)
            anchor = str(element.get("id") or "") or slugify(heading_text)
            current = _SectionBuilder(
                heading=heading_text,
                heading_level=int(element.name[1]),
                anchor=anchor,
            )
            continue

        text = _render_fragment(element)
        if len(text) > MIN_FRAGMENT_LENGTH:
            current.content.append(text)

    if current.content:
        sections.append(current.finalize())

    return sections


def extract_page(html: str, url: str) -> Page:
    """Parse an HTML document into metadata and sections.

    Args:
        html: Raw HTML text
        url: Resolved public URL of the page

    Returns:
        Extracted Page

    Raises:
        ExtractionSkip: If the page should not be indexed
    """
    soup = BeautifulSoup(html, "html.parser")

    reason = should_skip(soup)
    if reason is not None:
        raise ExtractionSkip(reason)

    metadata = extract_metadata(soup, url)
    sections = extract_sections(soup)
    logger.debug(f"Extracted {len(sections)} sections from {url}")

    return Page(url=url, metadata=metadata, sections=sections)
