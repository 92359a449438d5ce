"""Adapter from an LLM client to the judgment backend interface."""

import structlog

from ago_diagnosis.llm.prompts import SYSTEM_INSTRUCTION
from ago_diagnosis.llm.protocols import LlmClient


logger = structlog.get_logger()


class LlmJudge:
    """Judgment backend backed by an ``LlmClient``.

    Every prompt is sent with the fixed rubric system instruction, which
    asks the model to lead with a 0-5 digit.
    """

    def __init__(
        self,
        client: LlmClient,
        system_instruction: str = SYSTEM_INSTRUCTION,
    ) -> None:
        self._client = client
        self._system_instruction = system_instruction
        self._log = logger.bind(component="llm", subcomponent="judge")

    @property
    def model(self) -> str:
        """Model identifier of the wrapped client, if it exposes one."""
        return str(getattr(self._client, "model", "unknown"))

    def complete(self, prompt: str) -> str:
        """Return the model's reply to ``prompt``.

        Raises:
            LlmApiError: Propagated from the client.
        """
        reply = self._client.generate_content(
            prompt=prompt,
            system_instruction=self._system_instruction,
        )
        self._log.debug("judgment_received", chars=len(reply))
        return reply.strip()
