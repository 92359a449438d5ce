"""Unit tests for Gemini API key client."""

from unittest.mock import MagicMock, patch

import httpx
import pytest

from ago_diagnosis.llm.errors import LlmApiError
from ago_diagnosis.llm.gemini_client import GeminiApiKeyClient


def _make_client(
    api_key: str = "test-api-key",  # noqa: S107
    model: str = "gemini-2.5-flash",
) -> GeminiApiKeyClient:
    """Create a test client."""
    return GeminiApiKeyClient(api_key=api_key, model=model, min_request_interval=0)


def _make_response(status_code: int = 200, text: str = "ok") -> MagicMock:
    """Create a mock generateContent response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = {
        "candidates": [{"content": {"parts": [{"text": text}]}}]
    }
    return response


class TestGeminiApiKeyClientGenerateContent:
    """Tests for GeminiApiKeyClient.generate_content."""

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_success_returns_text(self, mock_post: MagicMock) -> None:
        """Should return text from model response."""
        mock_post.return_value = _make_response(text="4\nGood structure.")

        result = _make_client().generate_content("Rate this page")

        assert result == "4\nGood structure."

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_sends_api_key_header(self, mock_post: MagicMock) -> None:
        """Should send x-goog-api-key header."""
        mock_post.return_value = _make_response()

        _make_client(api_key="my-key-123").generate_content("Test")

        headers = mock_post.call_args[1]["headers"]
        assert headers["x-goog-api-key"] == "my-key-123"

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_uses_model_endpoint(self, mock_post: MagicMock) -> None:
        """Should call the generativelanguage endpoint with model name."""
        mock_post.return_value = _make_response()

        _make_client(model="gemini-2.5-pro").generate_content("Test")

        url = mock_post.call_args[0][0]
        assert "generativelanguage.googleapis.com" in url
        assert url.endswith("gemini-2.5-pro:generateContent")

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_sends_system_instruction(self, mock_post: MagicMock) -> None:
        """Should include systemInstruction when provided."""
        mock_post.return_value = _make_response()

        _make_client().generate_content("Test", system_instruction="Be strict")

        body = mock_post.call_args[1]["json"]
        assert body["systemInstruction"] == {"parts": [{"text": "Be strict"}]}

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_no_candidates_raises(self, mock_post: MagicMock) -> None:
        """Should raise LlmApiError when the response has no candidates."""
        response = _make_response()
        response.json.return_value = {"candidates": []}
        mock_post.return_value = response

        with pytest.raises(LlmApiError, match="No candidates"):
            _make_client().generate_content("Test")

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_non_retryable_status_raises(self, mock_post: MagicMock) -> None:
        """Should raise immediately on 400."""
        mock_post.return_value = _make_response(status_code=400)

        with pytest.raises(LlmApiError) as exc_info:
            _make_client().generate_content("Test")

        assert exc_info.value.status_code == 400
        mock_post.assert_called_once()

    @patch("ago_diagnosis.llm.transport.time.sleep")
    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_retries_on_429(self, mock_post: MagicMock, mock_sleep: MagicMock) -> None:
        """Should back off and retry on rate limiting."""
        mock_post.side_effect = [
            _make_response(status_code=429),
            _make_response(text="5"),
        ]

        result = _make_client().generate_content("Test")

        assert result == "5"
        assert mock_post.call_count == 2
        mock_sleep.assert_called_once()

    @patch("ago_diagnosis.llm.transport.httpx.post")
    def test_network_error_wrapped(self, mock_post: MagicMock) -> None:
        """Should wrap transport errors in LlmApiError."""
        mock_post.side_effect = httpx.ConnectError("unreachable")

        with pytest.raises(LlmApiError, match="LLM request failed"):
            _make_client().generate_content("Test")
