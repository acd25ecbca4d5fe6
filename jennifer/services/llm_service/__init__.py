"""LLM Service for the Jennifer relay.

Hosted language-model clients that turn an ordered conversation history
plus the persona instruction into Jennifer's next reply.
"""

from .base_llm import (
    BaseLLM,
    HuggingFaceLLM,
    LLMConfig,
    LLMProvider,
    LLMResponse,
    OpenAILLM,
    create_llm,
)
from .persona import SYSTEM_PROMPT

__all__ = [
    "BaseLLM",
    "HuggingFaceLLM",
    "LLMConfig",
    "LLMProvider",
    "LLMResponse",
    "OpenAILLM",
    "create_llm",
    "SYSTEM_PROMPT",
]

__version__ = "1.0.0"
