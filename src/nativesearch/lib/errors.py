"""Custom exception hierarchy for nativesearch indexing, search and assistant."""


class NativeSearchError(Exception):
    """Base exception for all nativesearch errors.

    All nativesearch-specific exceptions inherit from this class, enabling
    centralized exception handling in the CLI and in embedding applications.
    """

    pass


class ConfigError(NativeSearchError):
    """Exception raised for configuration file errors.

    Raised when the configuration file cannot be read, parsed, or validated,
    or when an environment variable referenced by it is missing.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class ExtractionSkip(NativeSearchError):
    """Signal that a page is intentionally excluded from the index.

    Not a failure: 404 pages, redirects, and pages without enough content
    are skipped and counted, never reported as errors.

    Attributes:
        reason: Short description of why the page was skipped
    """

    def __init__(self, reason: str) -> None:
        """Create a skip signal with its reason."""
        self.reason = reason
        super().__init__(reason)


class FileProcessingError(NativeSearchError):
    """Exception raised when one HTML file fails to process.

    The indexer records these per file and keeps going, so a single bad
    file never fails the whole build.

    Attributes:
        file: Path of the file that failed
        message: Description of the underlying failure
    """

    def __init__(self, file: str, message: str) -> None:
        """Initialize FileProcessingError with the file and failure message.

        Args:
            file: Path to the file being processed
            message: Descriptive error message
        """
        self.file = file
        self.message = message
        super().__init__(f"Failed to process {file}: {message}")

    def to_dict(self) -> dict[str, str]:
        """Serialize as the ``{file, error}`` entry used in metadata.json."""
        return {"file": self.file, "error": self.message}


class LoadError(NativeSearchError):
    """Exception raised when a search index or chunk file cannot be loaded.

    Covers network failures, non-success HTTP statuses, unreadable local
    files, and bodies that are not a JSON array.

    Attributes:
        source: URL or path that was being loaded
        message: Human-readable error message
        status_code: HTTP status code when the server answered, else None
    """

    def __init__(
        self, source: str, message: str, status_code: int | None = None
    ) -> None:
        """Initialize LoadError with source and failure details.

        Args:
            source: URL or local path that failed to load
            message: Descriptive error message
            status_code: Optional HTTP status code
        """
        self.source = source
        self.message = message
        self.status_code = status_code
        detail = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"Failed to load {source}{detail}: {message}")


class ConfigurationError(NativeSearchError):
    """Exception raised when the assistant layer is misconfigured.

    Raised synchronously, before any network call, for an unknown LLM
    provider or when relevant chunks are requested before loading.
    """

    def __init__(self, message: str) -> None:
        """Create a configuration error for the assistant layer."""
        self.message = message
        super().__init__(message)


class AssistantError(NativeSearchError):
    """Exception raised when the answer backend or LLM provider call fails.

    Attributes:
        message: Human-readable error message
        status_code: HTTP status code returned by the remote side, if any
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Create an assistant error with an optional HTTP status."""
        self.message = message
        self.status_code = status_code
        super().__init__(message)
