"""Factory for the configured judgment backend."""

import structlog

from ago_diagnosis.llm.errors import LlmConfigError
from ago_diagnosis.llm.judge import LlmJudge
from ago_diagnosis.llm.protocols import JudgmentBackend, LlmClient


logger = structlog.get_logger()


def create_llm_client(
    *,
    gemini_api_key: str | None = None,
    openai_api_key: str | None = None,
    model: str | None = None,
    timeout: float = 30.0,
) -> LlmClient:
    """Create an LLM client using the best available credentials.

    Priority: Gemini API key > OpenAI API key.

    Args:
        gemini_api_key: Gemini API key.
        openai_api_key: OpenAI (or compatible) API key.
        model: Model identifier; provider default when omitted.
        timeout: Per-request timeout in seconds.

    Returns:
        An LlmClient implementation ready for use.

    Raises:
        LlmConfigError: If no credentials are provided.
    """
    log = logger.bind(component="llm", subcomponent="factory")

    if gemini_api_key:
        from ago_diagnosis.llm.gemini_client import (
            DEFAULT_GEMINI_MODEL,
            GeminiApiKeyClient,
        )

        log.info("llm_client_created", provider="gemini")
        return GeminiApiKeyClient(
            api_key=gemini_api_key,
            model=model or DEFAULT_GEMINI_MODEL,
            timeout=timeout,
        )

    if openai_api_key:
        from ago_diagnosis.llm.openai_client import (
            DEFAULT_OPENAI_MODEL,
            OpenAIChatClient,
        )

        log.info("llm_client_created", provider="openai")
        return OpenAIChatClient(
            api_key=openai_api_key,
            model=model or DEFAULT_OPENAI_MODEL,
            timeout=timeout,
        )

    msg = "No LLM credentials configured (need GEMINI_API_KEY or OPENAI_API_KEY)"
    raise LlmConfigError(msg)


def create_judgment_backend(
    *,
    gemini_api_key: str | None = None,
    openai_api_key: str | None = None,
    model: str | None = None,
    timeout: float = 30.0,
) -> JudgmentBackend | None:
    """Create the judgment backend, or None when no credentials exist.

    Without a backend, AI-judged and hybrid items degrade to error
    results while machine checks still run.
    """
    try:
        client = create_llm_client(
            gemini_api_key=gemini_api_key,
            openai_api_key=openai_api_key,
            model=model,
            timeout=timeout,
        )
    except LlmConfigError as exc:
        logger.warning("judgment_backend_unavailable", component="llm", reason=str(exc))
        return None
    return LlmJudge(client)
