"""Question answering over retrieved documentation chunks.

DocsAssistant ties the ContextAssembler to an answer source:

- a backend endpoint that receives ``{question, context, sources,
  systemPrompt, userPrompt}`` and returns ``{answer}``
- a direct LLM provider call (anthropic or openai), for development only
- neither, in which case the assembled prompt is returned for manual use

Streaming answers go through AnswerStream, an explicit event channel that
emits the sources first, then one text event per received network frame,
then a final done event.
"""

import codecs
import contextlib
from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import requests
from requests.exceptions import ConnectionError as RequestsConnectionError
from requests.exceptions import RequestException, Timeout

from nativesearch.config.defaults import PROVIDER_DEFAULTS
from nativesearch.lib.context_assembler import ContextAssembler
from nativesearch.lib.errors import AssistantError, ConfigurationError
from nativesearch.lib.logging_config import get_logger
from nativesearch.models.config import AssistantConfig

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant for Magnolia CMS documentation. \n"
    "Answer questions based ONLY on the provided documentation context.\n"
    "If the context doesn't contain enough information to fully answer, say so.\n"
    "Always cite specific pages when possible.\n"
    "Be concise but thorough."
)

NO_CONTEXT_ANSWER = (
    "I couldn't find relevant documentation to answer your question. "
    "Try rephrasing or being more specific."
)

STREAM_PATH = "/stream"


def build_user_prompt(context: str, question: str) -> str:
    """Render the user prompt sent alongside the system prompt."""
    return (
        f"Documentation Context:\n{context}\n\n---\n\n"
        f"Question: {question}\n\n"
        "Please answer based on the documentation above. Cite relevant pages."
    )


@dataclass
class AskResult:
    """Outcome of DocsAssistant.ask().

    ``answer`` is None when no backend or provider is configured; ``prompt``
    and ``system_prompt`` are then filled in for manual use.
    """

    answer: str | None
    sources: list[dict[str, str]] = field(default_factory=list)
    context: str | None = None
    prompt: str | None = None
    system_prompt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "answer": self.answer,
            "sources": self.sources,
            "context": self.context,
        }
        if self.prompt is not None:
            data["prompt"] = self.prompt
            data["systemPrompt"] = self.system_prompt
        return data


class StreamState(str, Enum):
    """Lifecycle of an AnswerStream."""

    SENDING = "sending"
    RECEIVING = "receiving"
    DONE = "done"


@dataclass(frozen=True)
class StreamEvent:
    """One event emitted by an AnswerStream.

    Attributes:
        type: ``sources``, ``text`` or ``done``
        text: Decoded text delta for ``text`` events
        sources: Source list for the ``sources`` event
    """

    type: str
    text: str | None = None
    sources: list[dict[str, str]] | None = None


class AnswerStream:
    """Streaming answer channel over a backend ``/stream`` endpoint.

    Iterating the stream emits a ``sources`` event before any network I/O,
    then POSTs ``{question, context}`` and emits a ``text`` event per
    received frame, then a ``done`` event. close() stops the stream and
    closes the underlying response; no further events are emitted.

    Example:
        >>> with assistant.stream("How do I install the CLI?") as stream:
        ...     for event in stream:
        ...         if event.type == "text":
        ...             print(event.text, end="")
    """

    def __init__(
        self,
        session: requests.Session,
        url: str,
        payload: dict[str, Any],
        sources: list[dict[str, str]],
        timeout: float,
    ) -> None:
        self._session = session
        self._url = url
        self._payload = payload
        self._sources = sources
        self._timeout = timeout
        self._response: requests.Response | None = None
        self._closed = False
        self.state = StreamState.SENDING

    @property
    def closed(self) -> bool:
        return self._closed

    def __iter__(self) -> Iterator[StreamEvent]:
        return self._events()

    def __enter__(self) -> "AnswerStream":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _events(self) -> Iterator[StreamEvent]:
        if self._closed:
            return
        yield StreamEvent(type="sources", sources=self._sources)
        if self._closed:
            return

        response = _post(self._session, self._url, self._payload, self._timeout, stream=True)
        self._response = response
        self.state = StreamState.RECEIVING

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        try:
            frames = response.iter_content(chunk_size=None)
            while True:
                try:
                    frame = next(frames)
                except StopIteration:
                    break
                except Exception:
                    # A close() from another thread surfaces here as a read error
                    if self._closed:
                        return
                    raise
                if self._closed:
                    return
                text = decoder.decode(frame)
                if text:
                    yield StreamEvent(type="text", text=text)
            tail = decoder.decode(b"", final=True)
            if tail and not self._closed:
                yield StreamEvent(type="text", text=tail)
        finally:
            with contextlib.suppress(Exception):
                response.close()

        if self._closed:
            return
        self.state = StreamState.DONE
        yield StreamEvent(type="done")

    def close(self) -> None:
        """Cancel the stream and release the connection."""
        self._closed = True
        self.state = StreamState.DONE
        if self._response is not None:
            with contextlib.suppress(Exception):
                self._response.close()


def _post(
    session: requests.Session,
    url: str,
    payload: dict[str, Any],
    timeout: float,
    headers: dict[str, str] | None = None,
    stream: bool = False,
) -> requests.Response:
    """POST JSON with error handling.

    Raises:
        AssistantError: On connection failure, timeout or non-2xx status
    """
    try:
        response = session.post(
            url,
            json=payload,
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=timeout,
            stream=stream,
        )
    except Timeout as e:
        raise AssistantError(f"Request to {url} timed out after {timeout}s") from e
    except RequestsConnectionError as e:
        raise AssistantError(f"Could not connect to {url}: {e}") from e
    except RequestException as e:
        raise AssistantError(f"Request to {url} failed: {e}") from e

    if not response.ok:
        detail = response.reason or "request failed"
        with contextlib.suppress(Exception):
            detail = response.json().get("error", detail)
        response.close()
        raise AssistantError(
            f"Failed to get AI response: {detail}", status_code=response.status_code
        )

    return response


class DocsAssistant:
    """Answers documentation questions from retrieved chunks.

    Attributes:
        config: Assistant configuration
        assembler: Chunk retrieval and context packing
    """

    def __init__(
        self,
        config: AssistantConfig | None = None,
        assembler: ContextAssembler | None = None,
        session: requests.Session | None = None,
    ) -> None:
        self.config = config or AssistantConfig()
        self._session = session or requests.Session()
        self.assembler = assembler or ContextAssembler(self.config, session=self._session)

    def _check_provider(self) -> None:
        if self.config.api_key and self.config.provider not in PROVIDER_DEFAULTS:
            raise ConfigurationError(f"Unknown provider: {self.config.provider}")

    def ask(
        self,
        question: str,
        version: str | None = None,
        category: str | None = None,
        max_chunks: int | None = None,
    ) -> AskResult:
        """Answer a question from the documentation.

        Args:
            question: User question
            version: Restrict retrieval to one version
            category: Restrict retrieval to one category
            max_chunks: Overrides ``config.max_context_chunks``

        Returns:
            AskResult with the answer and its sources

        Raises:
            ConfigurationError: For an unknown provider
            LoadError: If chunks cannot be loaded
            AssistantError: If the backend or provider call fails
        """
        self._check_provider()
        self.assembler.load()

        relevant = self.assembler.find_relevant_chunks(
            question, max_chunks=max_chunks, version=version, category=category
        )
        if not relevant:
            logger.info("No relevant chunks found for question")
            return AskResult(answer=NO_CONTEXT_ANSWER, sources=[], context=None)

        assembled = self.assembler.build_context(relevant)
        user_prompt = build_user_prompt(assembled.context, question)
        logger.debug(
            f"Assembled context from {len(relevant)} chunks "
            f"(~{assembled.token_estimate} tokens)"
        )

        if self.config.api_endpoint and not self.config.api_key:
            answer = self._ask_backend(question, assembled.context, assembled.sources, user_prompt)
            return AskResult(answer=answer, sources=assembled.sources, context=assembled.context)

        if self.config.api_key:
            answer = self._call_provider(SYSTEM_PROMPT, user_prompt)
            return AskResult(answer=answer, sources=assembled.sources, context=assembled.context)

        return AskResult(
            answer=None,
            sources=assembled.sources,
            context=assembled.context,
            prompt=user_prompt,
            system_prompt=SYSTEM_PROMPT,
        )

    def _ask_backend(
        self,
        question: str,
        context: str,
        sources: list[dict[str, str]],
        user_prompt: str,
    ) -> str:
        endpoint = self.config.api_endpoint or ""
        response = _post(
            self._session,
            endpoint,
            {
                "question": question,
                "context": context,
                "sources": sources,
                "systemPrompt": SYSTEM_PROMPT,
                "userPrompt": user_prompt,
            },
            self.config.timeout,
        )
        try:
            return str(response.json()["answer"])
        except (ValueError, KeyError, TypeError) as e:
            raise AssistantError(f"Unexpected response from {endpoint}") from e

    def _call_provider(self, system_prompt: str, user_prompt: str) -> str:
        """Call the configured LLM provider directly.

        Raises:
            ConfigurationError: For an unknown provider
            AssistantError: If the call fails or the response is malformed
        """
        provider = self.config.provider
        if provider not in PROVIDER_DEFAULTS:
            raise ConfigurationError(f"Unknown provider: {provider}")

        defaults = PROVIDER_DEFAULTS[provider]
        model = self.config.model or defaults["model"]
        api_key = self.config.api_key or ""

        if provider == "anthropic":
            response = _post(
                self._session,
                defaults["url"],
                {
                    "model": model,
                    "max_tokens": self.config.max_answer_tokens,
                    "system": system_prompt,
                    "messages": [{"role": "user", "content": user_prompt}],
                },
                self.config.timeout,
                headers={
                    "x-api-key": api_key,
                    "anthropic-version": defaults["api_version"],
                },
            )
            try:
                return str(response.json()["content"][0]["text"])
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise AssistantError("Unexpected response from anthropic") from e

        response = _post(
            self._session,
            defaults["url"],
            {
                "model": model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                "max_tokens": self.config.max_answer_tokens,
            },
            self.config.timeout,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        try:
            return str(response.json()["choices"][0]["message"]["content"])
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise AssistantError("Unexpected response from openai") from e

    def stream(
        self,
        question: str,
        version: str | None = None,
        category: str | None = None,
        max_chunks: int | None = None,
    ) -> AnswerStream:
        """Prepare a streaming answer from the backend ``/stream`` endpoint.

        Retrieval happens here; no network request is made until the
        returned stream is iterated past its ``sources`` event.

        Raises:
            ConfigurationError: If no backend endpoint is configured
            LoadError: If chunks cannot be loaded
        """
        if not self.config.api_endpoint:
            raise ConfigurationError("Streaming requires an api_endpoint")

        self.assembler.load()
        relevant = self.assembler.find_relevant_chunks(
            question, max_chunks=max_chunks, version=version, category=category
        )
        assembled = self.assembler.build_context(relevant)

        return AnswerStream(
            session=self._session,
            url=self.config.api_endpoint.rstrip("/") + STREAM_PATH,
            payload={"question": question, "context": assembled.context},
            sources=assembled.sources,
            timeout=self.config.timeout,
        )
