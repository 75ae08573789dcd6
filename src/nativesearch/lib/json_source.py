"""Loading of JSON array artifacts from an HTTP(S) URL or a local path."""

import contextlib
import json
from pathlib import Path
from typing import Any

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout

from nativesearch.lib.errors import LoadError
from nativesearch.lib.logging_config import get_logger

logger = get_logger(__name__)


def is_remote(source: str) -> bool:
    """Return True when source is an http(s) URL."""
    return source.startswith(("http://", "https://"))


def _fetch(source: str, session: requests.Session, timeout: float) -> Any:
    try:
        response = session.get(source, timeout=timeout)
    except Timeout as e:
        raise LoadError(source, f"Request timed out after {timeout}s") from e
    except RequestsConnectionError as e:
        raise LoadError(source, f"Connection failed: {e}") from e
    except RequestException as e:
        raise LoadError(source, str(e)) from e

    if not response.ok:
        reason = response.reason or "request failed"
        with contextlib.suppress(Exception):
            response.close()
        raise LoadError(source, reason, status_code=response.status_code)

    try:
        return response.json()
    except ValueError as e:
        raise LoadError(source, f"Invalid JSON: {e}") from e


def _read(source: str) -> Any:
    path = Path(source)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise LoadError(source, f"Cannot read file: {e.strerror or e}") from e

    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise LoadError(source, f"Invalid JSON: {e}") from e


def load_json_array(
    source: str,
    session: requests.Session | None = None,
    timeout: float = 10.0,
) -> list[Any]:
    """Load a JSON array from a URL or file path.

    Args:
        source: http(s) URL or local file path
        session: Session used for remote sources (a new one when None)
        timeout: HTTP timeout in seconds

    Returns:
        The decoded list

    Raises:
        LoadError: On network failure, non-success status, unreadable file,
            invalid JSON, or a body that is not an array
    """
    if is_remote(source):
        logger.debug(f"Fetching {source}")
        data = _fetch(source, session or requests.Session(), timeout)
    else:
        logger.debug(f"Reading {source}")
        data = _read(source)

    if not isinstance(data, list):
        raise LoadError(
            source, f"Expected a JSON array, got {type(data).__name__}"
        )
    return data
