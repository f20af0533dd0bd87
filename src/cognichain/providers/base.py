"""Base classes for LLM providers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

ChatMessages = List[Dict[str, str]]


@dataclass
class LLMResponse:
    """Response from an LLM provider."""

    content: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)


class LLMProvider(ABC):
    """Abstract base class for LLM providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the provider name."""
        ...

    @abstractmethod
    def generate(
        self,
        messages: ChatMessages,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        """Generate a response from the LLM.

        Args:
            messages: Conversation in chat format, ``{"role", "content"}`` dicts.
            model: The model to use. If None, uses the default model.
            temperature: Sampling temperature (0.0-2.0).
            max_tokens: Maximum tokens to generate.
            **kwargs: Additional provider-specific parameters.

        Returns:
            LLMResponse containing the generated content and metadata.

        Raises:
            LLMProviderError: If the generation fails.
        """
        ...

    @abstractmethod
    def list_models(self) -> list[str]:
        """List model identifiers available from this provider."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is configured well enough to be called."""
        ...


class LLMProviderError(Exception):
    """Base exception for LLM provider errors."""

    def __init__(
        self,
        message: str,
        provider: str = "",
        model: str = "",
        is_retryable: bool = False,
    ):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.is_retryable = is_retryable


class RateLimitError(LLMProviderError):
    """Raised when rate limited by the provider."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=True)


class AuthenticationError(LLMProviderError):
    """Raised when authentication fails."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=False)


class ModelNotFoundError(LLMProviderError):
    """Raised when the requested model is not found."""

    def __init__(self, message: str, provider: str = "", model: str = ""):
        super().__init__(message, provider, model, is_retryable=False)


def classify_error(error: Exception, provider: str, model: str) -> LLMProviderError:
    """Map an SDK exception onto the provider error hierarchy by its message."""
    error_msg = str(error)
    lowered = error_msg.lower()
    if "rate limit" in lowered or "rate_limit" in lowered or "429" in error_msg:
        return RateLimitError(error_msg, provider=provider, model=model)
    if "auth" in lowered or "401" in error_msg or "403" in error_msg:
        return AuthenticationError(error_msg, provider=provider, model=model)
    if "not found" in lowered or "404" in error_msg:
        return ModelNotFoundError(error_msg, provider=provider, model=model)
    return LLMProviderError(
        error_msg,
        provider=provider,
        model=model,
        is_retryable=any(s in lowered for s in ("timeout", "timed out", "500", "503", "internal")),
    )
