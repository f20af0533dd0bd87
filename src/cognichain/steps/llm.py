"""Step that sends its input to an LLM provider."""

import asyncio
import logging
from typing import Any, Dict, List, Optional

from ..models.base import ChainResult
from ..providers.base import LLMProvider, LLMProviderError
from ..services.memory import ConversationMemory

logger = logging.getLogger(__name__)


class LLMStep:
    """Chain step backed by an LLMProvider.

    The blocking provider call runs in a worker thread. Provider errors that
    are not retryable become soft failures; retryable ones are re-raised so a
    surrounding RetryHandler can try the whole chain again.

    When bound to a ConversationMemory, the stored history is sent ahead of
    the input and the exchange is recorded once the model answers.
    """

    def __init__(
        self,
        provider: LLMProvider,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        system_prompt: Optional[str] = None,
        memory: Optional[ConversationMemory] = None,
        name: Optional[str] = None,
        **generation_kwargs: Any,
    ):
        self.provider = provider
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.memory = memory
        self.name = name or f"{provider.name}_step"
        self.generation_kwargs = generation_kwargs

    def build_messages(self, input_text: str) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = []
        if self.system_prompt:
            messages.append({"role": "system", "content": self.system_prompt})
        if self.memory is not None:
            messages.extend(self.memory.to_chat_messages())
        messages.append({"role": "user", "content": input_text})
        return messages

    async def execute(self, input_text: str) -> ChainResult:
        messages = self.build_messages(input_text)

        try:
            response = await asyncio.to_thread(
                self.provider.generate,
                messages,
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                **self.generation_kwargs,
            )
        except LLMProviderError as e:
            if e.is_retryable:
                raise
            logger.error(f"Step {self.name} failed: {e}")
            return ChainResult.fail(
                f"{self.provider.name} error: {e}",
                metadata={"step": self.name, "provider": self.provider.name},
            )

        if self.memory is not None:
            self.memory.add_user_message(input_text)
            self.memory.add_assistant_message(response.content, {"model": response.model})

        metadata: Dict[str, Any] = {
            "step": self.name,
            "provider": self.provider.name,
            "model": response.model,
        }
        if response.usage:
            metadata["usage"] = dict(response.usage)
        return ChainResult.ok(response.content, metadata)
