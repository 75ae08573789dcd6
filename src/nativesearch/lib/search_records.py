"""Search record construction: one record per page section."""

from nativesearch.lib.page_extractor import PageMetadata, Section
from nativesearch.lib.urls import content_hash
from nativesearch.models.records import SearchRecord


def build_search_text(*parts: str | None) -> str:
    """Join the non-empty parts with spaces and lowercase the result."""
    return " ".join(part for part in parts if part).lower()


def create_search_record(
    metadata: PageMetadata, section: Section, url: str
) -> SearchRecord:
    """Create the search record for a single section of a page.

    Args:
        metadata: Metadata of the page the section belongs to
        section: Extracted section
        url: Page URL without anchor

    Returns:
        SearchRecord addressed by ``url#anchor`` when the section has an anchor
    """
    full_url = f"{url}#{section.anchor}" if section.anchor else url

    return SearchRecord(
        id=content_hash(full_url),
        url=full_url,
        title=metadata.title,
        heading=section.heading,
        heading_level=section.heading_level,
        content=section.content_preview,
        full_content=section.content,
        category=metadata.category,
        version=metadata.version,
        breadcrumb=list(metadata.breadcrumb),
        search_text=build_search_text(metadata.title, section.heading, section.content),
    )


def create_search_records(
    metadata: PageMetadata, sections: list[Section], url: str
) -> list[SearchRecord]:
    """Create search records for every section of a page, in order."""
    return [create_search_record(metadata, section, url) for section in sections]
