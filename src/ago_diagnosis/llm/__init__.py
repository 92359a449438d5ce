"""Language model judgment backends."""

from ago_diagnosis.llm.errors import LlmApiError, LlmConfigError
from ago_diagnosis.llm.factory import create_judgment_backend, create_llm_client
from ago_diagnosis.llm.judge import LlmJudge
from ago_diagnosis.llm.prompts import SYSTEM_INSTRUCTION, build_judgment_prompt
from ago_diagnosis.llm.protocols import JudgmentBackend, LlmClient


__all__ = [
    "SYSTEM_INSTRUCTION",
    "JudgmentBackend",
    "LlmApiError",
    "LlmClient",
    "LlmConfigError",
    "LlmJudge",
    "build_judgment_prompt",
    "create_judgment_backend",
    "create_llm_client",
]
