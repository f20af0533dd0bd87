"""Provider for OpenAI and OpenAI-compatible chat completion APIs."""

import logging
import os
from typing import Any, Optional

import httpx
from openai import OpenAI

from .base import AuthenticationError, ChatMessages, LLMProvider, LLMResponse, classify_error

logger = logging.getLogger(__name__)

OPENAI_BASE_URL = "https://api.openai.com/v1"


class OpenAICompatibleProvider(LLMProvider):
    """LLM provider using the OpenAI SDK.

    ``base_url`` points the client at any endpoint speaking the OpenAI chat
    completions protocol (OpenAI, Azure OpenAI deployments, OpenRouter,
    local gateways).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        default_model: str = "gpt-4o-mini",
        base_url: Optional[str] = None,
        timeout: float = 600.0,
        default_headers: Optional[dict[str, str]] = None,
    ):
        """Initialize the provider.

        Args:
            api_key: API key. If None, reads from the OPENAI_API_KEY env var.
            default_model: Default model to use for generation.
            base_url: API root. If None, reads OPENAI_BASE_URL or uses OpenAI's.
            timeout: Request timeout in seconds.
            default_headers: Extra headers sent with every request.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.default_model = default_model
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL") or OPENAI_BASE_URL
        self.timeout = timeout
        self.default_headers = default_headers or {}
        self._client: Optional[OpenAI] = None
        self._models_cache: Optional[list[str]] = None

    @property
    def name(self) -> str:
        return "openai"

    @property
    def client(self) -> OpenAI:
        """Get or create the OpenAI client."""
        if self._client is None:
            if not self.api_key:
                raise AuthenticationError(
                    "API key not configured. Set OPENAI_API_KEY environment variable.",
                    provider=self.name,
                )
            self._client = OpenAI(
                base_url=self.base_url,
                api_key=self.api_key,
                timeout=self.timeout,
                default_headers=self.default_headers or None,
            )
        return self._client

    def generate(
        self,
        messages: ChatMessages,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        model_id = model or self.default_model
        logger.info(f"Generating with {self.name} model: {model_id}")

        try:
            response = self.client.chat.completions.create(
                model=model_id,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
                **kwargs,
            )
        except AuthenticationError:
            raise
        except Exception as e:
            logger.error(f"{self.name} error: {e}")
            raise classify_error(e, provider=self.name, model=model_id) from e

        content = response.choices[0].message.content or ""
        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.info(f"Response received from {model_id}")
        return LLMResponse(
            content=content,
            model=model_id,
            usage=usage,
            metadata={"id": response.id, "created": response.created},
        )

    def list_models(self, force_refresh: bool = False) -> list[str]:
        """List model ids from the ``/models`` endpoint, cached after the first call."""
        if self._models_cache is not None and not force_refresh:
            return self._models_cache

        logger.info(f"Fetching models from {self.base_url}")
        try:
            response = httpx.get(
                f"{self.base_url.rstrip('/')}/models",
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=30.0,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Failed to fetch models: {e}")
            return self._models_cache or []

        models = [m["id"] for m in data.get("data", []) if "id" in m]
        self._models_cache = models
        logger.info(f"Fetched {len(models)} models")
        return models

    def is_available(self) -> bool:
        return bool(self.api_key)
