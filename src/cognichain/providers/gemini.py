"""Provider for Google Gemini models with primary/fallback failover."""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Optional

import google.generativeai as genai

from .base import (
    AuthenticationError,
    ChatMessages,
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    classify_error,
)

logger = logging.getLogger(__name__)


def split_messages(messages: ChatMessages) -> tuple[Optional[str], list[dict[str, Any]]]:
    """Convert chat messages into a Gemini system instruction and contents."""
    system_parts = [m["content"] for m in messages if m["role"] == "system"]
    contents = [
        {"role": "model" if m["role"] == "assistant" else "user", "parts": [m["content"]]}
        for m in messages
        if m["role"] != "system"
    ]
    return ("\n\n".join(system_parts) or None), contents


class GeminiProvider(LLMProvider):
    """Calls a primary Gemini model and falls back to a second one on failure."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        primary_model: Optional[str] = None,
        fallback_model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        self.primary_model_name = primary_model or os.getenv(
            "GEMINI_MODEL_PRIMARY", "gemini-2.0-flash"
        )
        # An empty string disables failover
        self.fallback_model_name = (
            fallback_model
            if fallback_model is not None
            else os.getenv("GEMINI_MODEL_FALLBACK", "gemini-1.5-pro")
        )
        # Timeout configuration (in seconds)
        self.timeout = (
            timeout
            if timeout is not None
            else float(os.getenv("GEMINI_MODEL_TIMEOUT", "10000")) / 1000
        )
        self._configured = False

        self.primary_calls = 0
        self.fallback_calls = 0
        self.primary_failures = 0

    @property
    def name(self) -> str:
        return "gemini"

    def _configure(self) -> None:
        if self._configured:
            return
        if not self.api_key:
            raise AuthenticationError(
                "Gemini API key not configured. Set GEMINI_API_KEY environment variable.",
                provider=self.name,
            )
        genai.configure(api_key=self.api_key)
        self._configured = True

    def _generate_with_timeout(
        self,
        model_name: str,
        messages: ChatMessages,
        generation_config: dict[str, Any],
        timeout: float,
    ):
        """Run one generation call in a worker thread bounded by ``timeout``."""
        system_instruction, contents = split_messages(messages)
        model = genai.GenerativeModel(model_name, system_instruction=system_instruction)

        # No context manager: its shutdown would block on a hung call
        executor = ThreadPoolExecutor(max_workers=1)
        try:
            future = executor.submit(
                model.generate_content,
                contents,
                generation_config=generation_config,
                request_options={"timeout": timeout},
            )
            try:
                return future.result(timeout=timeout)
            except FutureTimeoutError:
                logger.warning(f"{model_name} timed out after {timeout}s")
                future.cancel()
                raise TimeoutError(f"{model_name} generation timed out")
        finally:
            executor.shutdown(wait=False)

    def generate(
        self,
        messages: ChatMessages,
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ) -> LLMResponse:
        self._configure()

        generation_config: dict[str, Any] = {"temperature": temperature, **kwargs}
        if max_tokens is not None:
            generation_config["max_output_tokens"] = max_tokens

        primary = model or self.primary_model_name
        try:
            self.primary_calls += 1
            response = self._generate_with_timeout(
                primary, messages, generation_config, self.timeout
            )
            logger.debug("Primary model responded successfully")
            return self._to_response(response, primary)
        except Exception as e:
            self.primary_failures += 1
            logger.warning(
                f"Primary model failed (attempt {self.primary_failures}): {type(e).__name__}: {e}"
            )
            if not self.fallback_model_name or self.fallback_model_name == primary:
                raise classify_error(e, provider=self.name, model=primary) from e

        try:
            self.fallback_calls += 1
            response = self._generate_with_timeout(
                self.fallback_model_name,
                messages,
                generation_config,
                self.timeout * 1.5,  # Give fallback more time
            )
            logger.info("Fallback model responded successfully")
            return self._to_response(response, self.fallback_model_name)
        except Exception as e:
            logger.error(f"Fallback model also failed: {type(e).__name__}: {e}")
            raise classify_error(e, provider=self.name, model=self.fallback_model_name) from e

    @staticmethod
    def _to_response(response: Any, model_name: str) -> LLMResponse:
        usage = {}
        usage_metadata = getattr(response, "usage_metadata", None)
        if usage_metadata is not None:
            usage = {
                "prompt_tokens": getattr(usage_metadata, "prompt_token_count", 0),
                "completion_tokens": getattr(usage_metadata, "candidates_token_count", 0),
                "total_tokens": getattr(usage_metadata, "total_token_count", 0),
            }
        return LLMResponse(content=response.text, model=model_name, usage=usage)

    def list_models(self) -> list[str]:
        self._configure()
        try:
            return [
                m.name
                for m in genai.list_models()
                if "generateContent" in getattr(m, "supported_generation_methods", [])
            ]
        except Exception as e:
            logger.error(f"Failed to list Gemini models: {e}")
            raise LLMProviderError(str(e), provider=self.name) from e

    def is_available(self) -> bool:
        return bool(self.api_key)

    def get_stats(self) -> dict:
        """Get usage statistics for the provider."""
        primary_success_rate = (
            (self.primary_calls - self.primary_failures) / self.primary_calls
            if self.primary_calls > 0
            else 0
        )
        return {
            "primary_model": self.primary_model_name,
            "fallback_model": self.fallback_model_name,
            "total_calls": self.primary_calls + self.fallback_calls,
            "primary_calls": self.primary_calls,
            "fallback_calls": self.fallback_calls,
            "primary_failures": self.primary_failures,
            "primary_success_rate": primary_success_rate,
            "timeout_seconds": self.timeout,
        }
