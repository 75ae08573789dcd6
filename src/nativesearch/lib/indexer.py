"""Static site indexing pipeline.

Walks a directory of built HTML pages and produces the search artifacts:

- search-index.json / search-index.min.json: one SearchRecord per section
- llm-chunks.json: token-budgeted LlmChunks per page
- metadata.json: build time, base URL, stats, categories and versions

Per-file failures are recorded and never abort the build. Extraction can run
on a thread pool; results are merged back in file order so the output is
identical to a sequential run.

Example:
    >>> indexer = SiteIndexer(IndexerConfig(site_dir="build/site"))
    >>> result = indexer.run()
    >>> result.stats.search_records
    4211
"""

import json
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from opentelemetry import trace

from nativesearch.lib.errors import ExtractionSkip, FileProcessingError
from nativesearch.lib.logging_config import get_logger
from nativesearch.lib.page_extractor import extract_page
from nativesearch.lib.search_records import create_search_records
from nativesearch.lib.section_chunker import SectionChunker
from nativesearch.lib.urls import path_to_url
from nativesearch.models.config import IndexerConfig
from nativesearch.models.records import LlmChunk, SearchRecord

logger = get_logger(__name__)

tracer = trace.get_tracer("nativesearch.indexer")

SKIP_DIRECTORIES = frozenset({"_", "node_modules", ".git", "assets"})

SEARCH_INDEX_FILE = "search-index.json"
COMPACT_INDEX_FILE = "search-index.min.json"
LLM_CHUNKS_FILE = "llm-chunks.json"
METADATA_FILE = "metadata.json"

PROGRESS_INTERVAL = 100
LARGE_CHUNK_TOKENS = 2000
VERY_LARGE_CHUNK_TOKENS = 3000
MAX_REPORTED_ERRORS = 5


@dataclass
class PageResult:
    """Output of processing one HTML file.

    ``skip_reason`` is set (and records/chunks are empty) when the page was
    intentionally left out.
    """

    file: Path
    records: list[SearchRecord] = field(default_factory=list)
    chunks: list[LlmChunk] = field(default_factory=list)
    skip_reason: str | None = None


@dataclass
class IndexStats:
    """Counters reported in metadata.json."""

    files_processed: int = 0
    pages_skipped: int = 0
    search_records: int = 0
    llm_chunks: int = 0
    pages_split: int = 0
    errors: list[FileProcessingError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "filesProcessed": self.files_processed,
            "pagesSkipped": self.pages_skipped,
            "searchRecords": self.search_records,
            "llmChunks": self.llm_chunks,
            "pagesSplit": self.pages_split,
            "errors": [error.to_dict() for error in self.errors],
        }


def _unique(values: Iterable[str]) -> list[str]:
    """Distinct values in first-seen order."""
    return list(dict.fromkeys(values))


@dataclass
class IndexResult:
    """Everything produced by one indexing run."""

    search_index: list[SearchRecord] = field(default_factory=list)
    llm_chunks: list[LlmChunk] = field(default_factory=list)
    stats: IndexStats = field(default_factory=IndexStats)

    @property
    def categories(self) -> list[str]:
        return _unique(record.category for record in self.search_index)

    @property
    def versions(self) -> list[str]:
        return _unique(record.version for record in self.search_index)

    def chunk_size_summary(self) -> dict[str, int]:
        """Max/average chunk size and counts of oversized chunks."""
        sizes = [chunk.token_estimate for chunk in self.llm_chunks]
        if not sizes:
            return {}
        return {
            "max": max(sizes),
            "avg": round(sum(sizes) / len(sizes)),
            "large": sum(1 for size in sizes if size > LARGE_CHUNK_TOKENS),
            "very_large": sum(1 for size in sizes if size > VERY_LARGE_CHUNK_TOKENS),
        }


class SiteIndexer:
    """Builds search and LLM artifacts from a static HTML site.

    Attributes:
        config: Indexer configuration
        site_dir: Root of the HTML site
        output_dir: Directory receiving the artifacts
    """

    def __init__(self, config: IndexerConfig | None = None) -> None:
        self.config = config or IndexerConfig()
        self.site_dir = Path(self.config.site_dir)
        self.output_dir = Path(self.config.output_dir)
        self.chunker = SectionChunker(self.config.max_chunk_tokens)

    def find_html_files(self, directory: Path | None = None) -> list[Path]:
        """Recursively list ``*.html`` files, skipping non-content directories.

        Directories are walked depth-first with entries in name order.
        """
        root = directory or self.site_dir
        files: list[Path] = []
        for entry in sorted(root.iterdir(), key=lambda p: p.name):
            if entry.is_dir():
                if entry.name not in SKIP_DIRECTORIES:
                    files.extend(self.find_html_files(entry))
            elif entry.name.endswith(".html"):
                files.append(entry)
        return files

    def page_url(self, file_path: Path) -> str:
        """Public URL of an HTML file under the site directory."""
        relative = file_path.relative_to(self.site_dir).as_posix()
        return path_to_url(relative, self.config.base_url)

    def process_file(self, file_path: Path) -> PageResult:
        """Extract records and chunks from one HTML file.

        Raises:
            OSError: If the file cannot be read
        """
        html = file_path.read_text(encoding="utf-8")
        url = self.page_url(file_path)

        try:
            page = extract_page(html, url)
        except ExtractionSkip as skip:
            logger.debug(f"Skipping {file_path}: {skip.reason}")
            return PageResult(file=file_path, skip_reason=skip.reason)

        return PageResult(
            file=file_path,
            records=create_search_records(page.metadata, page.sections, url),
            chunks=self.chunker.chunk_page(page.metadata, page.sections, url),
        )

    def _process_safely(self, file_path: Path) -> PageResult | FileProcessingError:
        try:
            return self.process_file(file_path)
        except Exception as e:
            logger.debug(f"Error processing {file_path}: {e}", exc_info=True)
            return FileProcessingError(str(file_path), str(e))

    def build(self) -> IndexResult:
        """Process every HTML file and collect the results in file order.

        Raises:
            FileNotFoundError: If the site directory does not exist
        """
        if not self.site_dir.is_dir():
            raise FileNotFoundError(f"Site directory not found: {self.site_dir}")

        with tracer.start_as_current_span(
            "nativesearch.index.build",
            attributes={
                "index.site_dir": str(self.site_dir),
                "index.workers": self.config.workers,
            },
        ) as span:
            logger.info(f"Scanning {self.site_dir}...")
            files = self.find_html_files()
            logger.info(f"Found {len(files)} HTML files")
            span.set_attribute("index.file_count", len(files))

            if self.config.workers > 1:
                with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
                    outcomes = list(executor.map(self._process_safely, files))
            else:
                outcomes = [self._process_safely(path) for path in files]

            result = IndexResult()
            stats = result.stats
            for outcome in outcomes:
                if isinstance(outcome, FileProcessingError):
                    stats.errors.append(outcome)
                    continue

                stats.files_processed += 1
                if stats.files_processed % PROGRESS_INTERVAL == 0:
                    logger.info(f"Processed {stats.files_processed} files...")

                if outcome.skip_reason is not None:
                    stats.pages_skipped += 1
                    continue

                result.search_index.extend(outcome.records)
                result.llm_chunks.extend(outcome.chunks)
                stats.search_records += len(outcome.records)
                stats.llm_chunks += len(outcome.chunks)
                if len(outcome.chunks) > 1:
                    stats.pages_split += 1

            span.set_attribute("index.search_records", stats.search_records)
            span.set_attribute("index.llm_chunks", stats.llm_chunks)
            span.set_attribute("index.errors", len(stats.errors))
            return result

    def write_outputs(self, result: IndexResult) -> dict[str, Path]:
        """Write the JSON artifacts to the output directory.

        Returns:
            Mapping of artifact file name to written path
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        records = [record.to_json_dict() for record in result.search_index]
        chunks = [chunk.to_json_dict() for chunk in result.llm_chunks]
        metadata = {
            "generated": datetime.now(timezone.utc)
            .isoformat(timespec="milliseconds")
            .replace("+00:00", "Z"),
            "baseUrl": self.config.base_url,
            "stats": result.stats.to_dict(),
            "categories": result.categories,
            "versions": result.versions,
        }

        artifacts = {
            SEARCH_INDEX_FILE: json.dumps(records, indent=2, ensure_ascii=False),
            COMPACT_INDEX_FILE: json.dumps(
                records, separators=(",", ":"), ensure_ascii=False
            ),
            LLM_CHUNKS_FILE: json.dumps(chunks, indent=2, ensure_ascii=False),
            METADATA_FILE: json.dumps(metadata, indent=2, ensure_ascii=False),
        }

        written: dict[str, Path] = {}
        for name, payload in artifacts.items():
            path = self.output_dir / name
            path.write_text(payload, encoding="utf-8")
            logger.info(f"Wrote {path}")
            written[name] = path
        return written

    def log_summary(self, result: IndexResult) -> None:
        """Log counts, chunk size statistics and the first few errors."""
        stats = result.stats
        logger.info(f"Files processed: {stats.files_processed}")
        logger.info(f"Pages skipped:   {stats.pages_skipped}")
        logger.info(f"Search records:  {stats.search_records}")
        logger.info(f"LLM chunks:      {stats.llm_chunks}")
        logger.info(f"Pages split:     {stats.pages_split}")

        sizes = result.chunk_size_summary()
        if sizes:
            logger.info(f"Max chunk size:  {sizes['max']} tokens")
            logger.info(f"Avg chunk size:  {sizes['avg']} tokens")
            if sizes["large"]:
                logger.info(f"Large chunks (>{LARGE_CHUNK_TOKENS}): {sizes['large']}")
            if sizes["very_large"]:
                logger.info(
                    f"Very large (>{VERY_LARGE_CHUNK_TOKENS}):   {sizes['very_large']}"
                )

        if stats.errors:
            logger.warning(f"Errors:          {len(stats.errors)}")
            for error in stats.errors[:MAX_REPORTED_ERRORS]:
                logger.warning(f"  - {error.file}: {error.message}")

    def run(self) -> IndexResult:
        """Build the index, write all artifacts and log a summary."""
        result = self.build()
        self.write_outputs(result)
        self.log_summary(result)
        return result
