"""
LLM Client - Completion interface for OpenAI-compatible providers.
Supports OpenAI, Mistral, OpenRouter, and Ollama.
"""
from openai import AsyncOpenAI, APIError, APITimeoutError
from typing import Optional, Protocol
import logging

import httpx

from .prompts import PromptPair, build_messages
from ..config import get_llm_config

logger = logging.getLogger(__name__)


class GenerativeBackend(Protocol):
    """Anything that turns a (system, user) prompt pair into text."""

    async def complete(self, system: str, user: str) -> Optional[str]:
        ...


class LLMClient:
    """Async LLM client with OpenAI-compatible API."""

    def __init__(self, config: Optional[dict] = None, http_client: Optional[httpx.AsyncClient] = None):
        config = config or get_llm_config()
        self.client = AsyncOpenAI(
            api_key=config["api_key"],
            base_url=config["base_url"],
            timeout=config["timeout"],
            max_retries=0,
            http_client=http_client,
        )
        self.model = config["model"]
        self.temperature = config["temperature"]
        self.max_tokens = config["max_tokens"]

    async def complete(self, system: str, user: str) -> Optional[str]:
        """
        Send one chat completion request.

        Args:
            system: System instruction
            user: User instruction

        Returns:
            The assistant's text, or None when the backend produced nothing
            (empty choice, timeout, API failure)
        """
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=build_messages(PromptPair(system, user)),
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except APITimeoutError:
            logger.error(f"LLM request timed out (model={self.model})")
            return None
        except APIError as e:
            logger.error(f"LLM request failed (model={self.model}): {e}")
            return None

        if not response.choices:
            return None
        choice = response.choices[0]
        if choice.finish_reason == "length":
            logger.warning(f"LLM output truncated at max_tokens={self.max_tokens}")
        return choice.message.content

    async def aclose(self) -> None:
        await self.client.close()
