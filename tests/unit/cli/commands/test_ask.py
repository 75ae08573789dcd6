"""Unit tests for the 'nativesearch ask' command.

Tests cover:
- Context-only mode printing the assembled prompt
- JSON output
- Backend calls and streaming with a mocked HTTP session
- Exit codes for load failures
"""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

QUESTION = "How do I configure the DAM module?"
DAM_URL = "https://docs.example.com/product-docs/6.3/dam/"


class TestAskCommand:
    """Tests for the ask command."""

    def test_context_only(self, built_index: Path) -> None:
        """Test --context-only prints the prompts and sources."""
        from nativesearch.cli.main import main

        result = CliRunner().invoke(
            main,
            [
                "ask",
                QUESTION,
                "--chunks",
                str(built_index / "llm-chunks.json"),
                "--context-only",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "System prompt:" in result.output
        assert "Prompt:" in result.output
        assert f"Question: {QUESTION}" in result.output
        assert "Sources:" in result.output
        assert DAM_URL in result.output

    def test_context_only_json(self, built_index: Path) -> None:
        """Test --json output carries the prompt fields."""
        from nativesearch.cli.main import main

        result = CliRunner().invoke(
            main,
            [
                "--quiet",
                "ask",
                QUESTION,
                "--chunks",
                str(built_index / "llm-chunks.json"),
                "--context-only",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["answer"] is None
        assert "systemPrompt" in data
        assert DAM_URL in [source["url"] for source in data["sources"]]

    def test_backend_answer(self, built_index: Path) -> None:
        """Test the backend answer is printed."""
        from nativesearch.cli.main import main

        session = MagicMock()
        session.post.return_value.ok = True
        session.post.return_value.json.return_value = {"answer": "Use YAML."}

        with patch("nativesearch.lib.assistant.requests.Session", return_value=session):
            result = CliRunner().invoke(
                main,
                [
                    "ask",
                    QUESTION,
                    "--chunks",
                    str(built_index / "llm-chunks.json"),
                    "--endpoint",
                    "https://docs.example.com/api/ask",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Use YAML." in result.output
        assert session.post.call_args.args[0] == "https://docs.example.com/api/ask"

    def test_stream(self, built_index: Path) -> None:
        """Test --stream prints text frames as they arrive."""
        from nativesearch.cli.main import main

        session = MagicMock()
        session.post.return_value.ok = True
        session.post.return_value.iter_content.return_value = iter([b"Use ", b"YAML."])

        with patch("nativesearch.lib.assistant.requests.Session", return_value=session):
            result = CliRunner().invoke(
                main,
                [
                    "ask",
                    QUESTION,
                    "--chunks",
                    str(built_index / "llm-chunks.json"),
                    "--endpoint",
                    "https://docs.example.com/api/ask",
                    "--stream",
                ],
            )

        assert result.exit_code == 0, result.output
        assert "Use YAML." in result.output
        assert "Sources:" in result.output
        assert session.post.call_args.args[0] == (
            "https://docs.example.com/api/ask/stream"
        )

    def test_backend_failure(self, built_index: Path) -> None:
        """Test a failing backend exits with code 1."""
        from nativesearch.cli.main import main

        session = MagicMock()
        session.post.return_value.ok = False
        session.post.return_value.status_code = 502
        session.post.return_value.reason = "Bad Gateway"
        session.post.return_value.json.side_effect = ValueError("no body")

        with patch("nativesearch.lib.assistant.requests.Session", return_value=session):
            result = CliRunner().invoke(
                main,
                [
                    "ask",
                    QUESTION,
                    "--chunks",
                    str(built_index / "llm-chunks.json"),
                    "--endpoint",
                    "https://docs.example.com/api/ask",
                ],
            )

        assert result.exit_code == 1
        assert "Bad Gateway" in result.output

    def test_missing_chunks(
        self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an unreadable chunk file exits with code 1."""
        from nativesearch.cli.main import main

        monkeypatch.chdir(temp_dir)

        result = CliRunner().invoke(
            main,
            ["ask", QUESTION, "--chunks", str(temp_dir / "missing.json"), "--context-only"],
        )

        assert result.exit_code == 1
        assert "Failed to load" in result.output
