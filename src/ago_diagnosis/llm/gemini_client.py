"""Standard Gemini API client using API key authentication."""

import structlog

from ago_diagnosis.llm.errors import LlmApiError
from ago_diagnosis.llm.transport import MinIntervalLimiter, post_with_retry


logger = structlog.get_logger()

_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/models"

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"


class GeminiApiKeyClient:
    """Client for the Gemini ``generateContent`` endpoint.

    Uses an ``x-goog-api-key`` header. API keys do not expire, which
    suits a long-running service.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_GEMINI_MODEL,
        timeout: float = 30.0,
        min_request_interval: float = 0.2,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: Gemini API key.
            model: Gemini model identifier.
            timeout: Per-request timeout in seconds.
            min_request_interval: Minimum seconds between requests.
        """
        self._api_key = api_key
        self.model = model
        self._timeout = timeout
        self._limiter = MinIntervalLimiter(min_request_interval)
        self._log = logger.bind(component="llm", subcomponent="gemini")

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        """Send a generate content request to the Gemini API.

        Args:
            prompt: User prompt text.
            system_instruction: Optional system instruction.

        Returns:
            Generated text from the model response.

        Raises:
            LlmApiError: If the API call fails after all retries.
        """
        request_body: dict[str, object] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"temperature": 0.0},
        }
        if system_instruction:
            request_body["systemInstruction"] = {
                "parts": [{"text": system_instruction}]
            }

        response = post_with_retry(
            f"{_BASE_URL}/{self.model}:generateContent",
            headers={
                "x-goog-api-key": self._api_key,
                "Content-Type": "application/json",
            },
            body=request_body,
            timeout=self._timeout,
            limiter=self._limiter,
            log=self._log,
        )

        data = response.json()
        candidates = data.get("candidates", [])
        if not candidates:
            msg = "No candidates in Gemini API response"
            raise LlmApiError(msg)

        parts = candidates[0].get("content", {}).get("parts", [])
        if not parts:
            msg = "No parts in first candidate"
            raise LlmApiError(msg)

        text: str = parts[0].get("text", "")
        if not text:
            msg = "Empty text in response"
            raise LlmApiError(msg)

        return text
