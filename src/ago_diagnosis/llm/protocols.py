"""Protocol interfaces for language model backends."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class LlmClient(Protocol):
    """Protocol for LLM content generation clients.

    Any client that implements ``generate_content`` with the matching
    signature can be used interchangeably, regardless of provider.
    """

    def generate_content(
        self,
        prompt: str,
        system_instruction: str | None = None,
    ) -> str:
        """Generate text from a prompt.

        Args:
            prompt: User prompt text.
            system_instruction: Optional system-level instruction.

        Returns:
            Generated text from the model.

        Raises:
            LlmApiError: If the API call fails.
        """
        ...


@runtime_checkable
class JudgmentBackend(Protocol):
    """Free-text judgment for a single rubric prompt."""

    def complete(self, prompt: str) -> str:
        """Return the backend's reply to ``prompt``.

        Raises:
            LlmApiError: On transport or quota failure.
        """
        ...
