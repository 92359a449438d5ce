"""OpenAI-compatible chat completions client."""

import structlog

from ago_diagnosis.llm.errors import LlmApiError
from ago_diagnosis.llm.transport import MinIntervalLimiter, post_with_retry


logger = structlog.get_logger()

DEFAULT_OPENAI_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


class OpenAIChatClient:
    """Client for a ``/v1/chat/completions`` endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_OPENAI_MODEL,
        url: str = DEFAULT_OPENAI_URL,
        timeout: float = 30.0,
        min_request_interval: float = 0.0,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self._url = url
        self._timeout = timeout
        self._limiter = MinIntervalLimiter(min_request_interval)
        self._log = logger.bind(component="llm", subcomponent="openai")

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        """Send a chat completion request.

        Args:
            prompt: User prompt text.
            system_instruction: Optional system message.

        Returns:
            Content of the first choice.

        Raises:
            LlmApiError: If the API call fails or the reply is empty.
        """
        messages: list[dict[str, str]] = []
        if system_instruction:
            messages.append({"role": "system", "content": system_instruction})
        messages.append({"role": "user", "content": prompt})

        response = post_with_retry(
            self._url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Content-Type": "application/json",
            },
            body={
                "model": self.model,
                "messages": messages,
                "temperature": 0.0,
                "max_tokens": 300,
            },
            timeout=self._timeout,
            limiter=self._limiter,
            log=self._log,
        )

        choices = response.json().get("choices", [])
        if not choices:
            msg = "No choices in chat completion response"
            raise LlmApiError(msg)

        text = choices[0].get("message", {}).get("content") or ""
        if not text:
            msg = "Empty text in response"
            raise LlmApiError(msg)

        return str(text)
