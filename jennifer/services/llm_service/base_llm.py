"""Base LLM interface and implementations.

Provides an abstract base class and concrete clients for the hosted
model providers the relay can forward conversations to.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

Message = Dict[str, str]


class LLMProvider(Enum):
    """Supported LLM providers."""
    OPENAI = "openai"
    HUGGINGFACE = "huggingface"


@dataclass
class LLMConfig:
    """Configuration for LLM inference."""
    provider: LLMProvider
    model_name: str
    endpoint: Optional[str] = None
    api_key: Optional[str] = None
    max_tokens: int = 1024
    temperature: float = 0.7
    top_p: float = 0.9
    timeout_seconds: int = 30


@dataclass
class LLMResponse:
    """Response from LLM inference."""
    text: str
    model: str
    provider: str
    tokens_used: Optional[int] = None
    latency_ms: Optional[float] = None
    metadata: Optional[Dict] = None


class BaseLLM(ABC):
    """Abstract base class for LLM implementations."""

    def __init__(self, config: LLMConfig):
        """Initialize LLM with configuration.

        Args:
            config: LLM configuration
        """
        self.config = config
        logger.info(
            "LLM_INITIALIZED",
            extra={
                "provider": config.provider.value,
                "model": config.model_name
            }
        )

    @abstractmethod
    async def generate(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
    ) -> LLMResponse:
        """Generate the next assistant reply for a conversation.

        Args:
            messages: Ordered {"role", "content"} history, oldest first,
                ending with the user turn being answered
            system_prompt: Optional persona/system instruction

        Returns:
            LLMResponse object

        Raises:
            ValueError: If the conversation is invalid
            Exception: Provider transport errors propagate unchanged
        """

    def validate_messages(self, messages: Sequence[Message]) -> bool:
        """Validate a conversation before sending it to the provider.

        Only an empty history is rejected. Individual turns are not length
        checked; the whole stored history is replayed on every call.
        """
        if not messages:
            logger.warning("LLM_EMPTY_CONVERSATION")
            return False

        return True


class OpenAILLM(BaseLLM):
    """OpenAI chat-completions implementation."""

    def __init__(self, config: LLMConfig):
        """Initialize OpenAI LLM.

        Args:
            config: LLM configuration with API key
        """
        super().__init__(config)

        if not config.api_key:
            raise ValueError("OpenAI API key required")

    def _client(self):
        import openai
        kwargs = {"api_key": self.config.api_key}
        if self.config.endpoint:
            kwargs["base_url"] = self.config.endpoint
        return openai.AsyncOpenAI(**kwargs)

    async def generate(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
    ) -> LLMResponse:
        if not self.validate_messages(messages):
            raise ValueError("Invalid conversation")

        payload: List[Message] = []
        if system_prompt:
            payload.append({"role": "system", "content": system_prompt})
        payload.extend({"role": m["role"], "content": m["content"]} for m in messages)

        start_time = time.time()

        try:
            # The async client is bound to the running event loop, so one
            # is opened per call.
            async with self._client() as client:
                response = await client.chat.completions.create(
                    model=self.config.model_name,
                    messages=payload,
                    max_tokens=self.config.max_tokens,
                    temperature=self.config.temperature,
                    top_p=self.config.top_p,
                    timeout=self.config.timeout_seconds,
                )

            latency_ms = (time.time() - start_time) * 1000

            generated_text = response.choices[0].message.content or ""
            tokens_used = response.usage.total_tokens if response.usage else None

            logger.info(
                "OPENAI_GENERATION_SUCCEEDED",
                extra={
                    "model": self.config.model_name,
                    "latency_ms": latency_ms,
                    "tokens_used": tokens_used,
                    "turns": len(messages),
                }
            )

            return LLMResponse(
                text=generated_text,
                model=self.config.model_name,
                provider=self.config.provider.value,
                tokens_used=tokens_used,
                latency_ms=latency_ms
            )

        except Exception as e:
            logger.error(
                "OPENAI_GENERATION_FAILED",
                extra={
                    "model": self.config.model_name,
                    "error": str(e)
                }
            )
            raise


class HuggingFaceLLM(BaseLLM):
    """HuggingFace Inference endpoint implementation.

    Text-generation endpoints take a single prompt, so the conversation is
    flattened into a speaker-labelled transcript.
    """

    SPEAKERS = {"user": "User", "assistant": "Jennifer"}

    def __init__(self, config: LLMConfig):
        """Initialize HuggingFace LLM.

        Args:
            config: LLM configuration with HuggingFace endpoint
        """
        super().__init__(config)

        if not config.endpoint:
            raise ValueError("HuggingFace endpoint required")

        self.endpoint = config.endpoint
        self.headers = {}

        if config.api_key:
            self.headers["Authorization"] = f"Bearer {config.api_key}"

    def format_prompt(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
    ) -> str:
        lines = []
        if system_prompt:
            lines.append(system_prompt)
            lines.append("")
        for message in messages:
            speaker = self.SPEAKERS.get(message["role"], message["role"])
            lines.append(f"{speaker}: {message['content']}")
        lines.append(f"{self.SPEAKERS['assistant']}:")
        return "\n".join(lines)

    async def generate(
        self,
        messages: Sequence[Message],
        system_prompt: Optional[str] = None,
    ) -> LLMResponse:
        import aiohttp

        if not self.validate_messages(messages):
            raise ValueError("Invalid conversation")

        payload = {
            "inputs": self.format_prompt(messages, system_prompt),
            "parameters": {
                "max_new_tokens": self.config.max_tokens,
                "temperature": self.config.temperature,
                "top_p": self.config.top_p,
                "return_full_text": False
            }
        }

        start_time = time.time()

        try:
            async with aiohttp.ClientSession() as session:
                async with session.post(
                    self.endpoint,
                    headers=self.headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds)
                ) as response:
                    response.raise_for_status()
                    result = await response.json()

            latency_ms = (time.time() - start_time) * 1000

            if isinstance(result, list) and len(result) > 0:
                generated_text = result[0].get("generated_text", "")
            else:
                generated_text = result.get("generated_text", "")

            logger.info(
                "HUGGINGFACE_GENERATION_SUCCEEDED",
                extra={
                    "model": self.config.model_name,
                    "latency_ms": latency_ms
                }
            )

            return LLMResponse(
                text=generated_text.strip(),
                model=self.config.model_name,
                provider=self.config.provider.value,
                latency_ms=latency_ms,
                metadata={"endpoint": self.endpoint}
            )

        except asyncio.TimeoutError:
            logger.error(
                "HUGGINGFACE_GENERATION_TIMEOUT",
                extra={
                    "model": self.config.model_name,
                    "timeout_seconds": self.config.timeout_seconds
                }
            )
            raise
        except Exception as e:
            logger.error(
                "HUGGINGFACE_GENERATION_FAILED",
                extra={
                    "model": self.config.model_name,
                    "error": str(e)
                }
            )
            raise


def create_llm(config: LLMConfig) -> BaseLLM:
    """Factory function to create LLM instance.

    Args:
        config: LLM configuration

    Returns:
        BaseLLM instance

    Raises:
        ValueError: If provider not supported
    """
    if config.provider == LLMProvider.OPENAI:
        return OpenAILLM(config)
    elif config.provider == LLMProvider.HUGGINGFACE:
        return HuggingFaceLLM(config)
    else:
        raise ValueError(f"Unsupported provider: {config.provider}")
