"""Test fixtures for the CogniChain tests."""

from typing import Any, Dict, List, Optional
from unittest.mock import Mock

from cognichain.models.base import ChainResult
from cognichain.providers.base import LLMProvider, LLMResponse


class RecordingStep:
    """Chain step returning a fixed result and recording its inputs."""

    def __init__(
        self,
        output: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        success: bool = True,
        error_message: Optional[str] = None,
    ):
        self.output = output
        self.metadata = metadata or {}
        self.success = success
        self.error_message = error_message
        self.inputs: List[str] = []

    @property
    def call_count(self) -> int:
        return len(self.inputs)

    async def execute(self, input_text: str) -> ChainResult:
        self.inputs.append(input_text)
        return ChainResult(
            output=self.output if self.output is not None else input_text,
            metadata=dict(self.metadata),
            success=self.success,
            error_message=self.error_message,
        )


class FlakyOperation:
    """Async callable that raises ``failures`` times before returning ``value``."""

    def __init__(self, failures: int, value: Any = "ok", error_type: type = RuntimeError):
        self.failures = failures
        self.value = value
        self.error_type = error_type
        self.calls = 0

    async def __call__(self) -> Any:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error_type(f"failure {self.calls}")
        return self.value


class FakeProvider(LLMProvider):
    """In-memory provider returning canned responses."""

    def __init__(self, responses: Optional[List[Any]] = None, model: str = "fake-model"):
        self.responses = list(responses or ["fake response"])
        self.model = model
        self.calls: List[Dict[str, Any]] = []

    @property
    def name(self) -> str:
        return "fake"

    def generate(self, messages, model=None, temperature=0.7, max_tokens=None, **kwargs):
        self.calls.append(
            {"messages": messages, "model": model, "temperature": temperature, **kwargs}
        )
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return LLMResponse(
            content=response, model=model or self.model, usage={"total_tokens": 7}
        )

    def list_models(self):
        return [self.model]

    def is_available(self):
        return True


def create_mock_completion(content: str = "Test response"):
    """Build an object shaped like an OpenAI chat completion."""
    completion = Mock()
    completion.id = "chatcmpl-123"
    completion.created = 1700000000
    completion.choices = [Mock()]
    completion.choices[0].message.content = content
    completion.usage.prompt_tokens = 10
    completion.usage.completion_tokens = 5
    completion.usage.total_tokens = 15
    return completion
