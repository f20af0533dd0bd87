"""LLM provider adapters."""

from .base import (
    AuthenticationError,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    ModelNotFoundError,
    RateLimitError,
)
from .gemini import GeminiProvider
from .openai_compat import OpenAICompatibleProvider

__all__ = [
    "AuthenticationError",
    "GeminiProvider",
    "LLMProvider",
    "LLMProviderError",
    "LLMResponse",
    "ModelNotFoundError",
    "OpenAICompatibleProvider",
    "RateLimitError",
]
