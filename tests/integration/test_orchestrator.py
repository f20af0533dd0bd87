"""Integration tests for the orchestrator."""

from dataclasses import dataclass

import pytest

from cognichain.core.chain import Chain
from cognichain.core.orchestrator import LLMOrchestrator, StepFailedError, WorkflowBuilder
from cognichain.core.prompt import PromptTemplate
from cognichain.core.registry import ToolNotFoundError, ToolRegistry
from cognichain.models.base import ChainResult
from cognichain.models.config import OrchestratorConfig, RetryPolicy
from cognichain.providers.base import RateLimitError
from cognichain.services.memory import ConversationMemory
from cognichain.services.retry import RetryError
from cognichain.steps import FunctionStep, LLMStep, TemplateStep
from cognichain.tools.calculator import CalculatorTool
from tests.fixtures import FakeProvider, RecordingStep

FAST_POLICY = RetryPolicy(max_retries=3, initial_delay_ms=0, use_jitter=False)


@dataclass
class Person:
    name: str
    age: int


class FlakyStep:
    """Raises a few times before succeeding."""

    def __init__(self, failures: int):
        self.failures = failures
        self.calls = 0

    async def execute(self, input_text: str) -> ChainResult:
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"transient {self.calls}")
        return ChainResult.ok(f"{input_text} ok", {"calls": self.calls})


class FlakyTool:
    name = "flaky"
    description = "Fails once"

    def __init__(self):
        self.calls = 0

    async def execute(self, input_text: str) -> str:
        self.calls += 1
        if self.calls == 1:
            raise TimeoutError("slow")
        return input_text[::-1]


class TestLLMOrchestrator:
    """Integration tests for LLMOrchestrator."""

    @pytest.fixture
    def orchestrator(self):
        return LLMOrchestrator(OrchestratorConfig(retry_policy=FAST_POLICY))

    def test_defaults(self):
        orchestrator = LLMOrchestrator()

        assert orchestrator.memory.max_messages == 10
        assert isinstance(orchestrator.tools, ToolRegistry)
        assert orchestrator.retry_handler.policy == RetryPolicy.default()

    def test_uses_supplied_collaborators(self):
        memory = ConversationMemory(max_messages=2)
        registry = ToolRegistry()

        orchestrator = LLMOrchestrator(tool_registry=registry, memory=memory)

        assert orchestrator.memory is memory
        assert orchestrator.tools is registry

    def test_memory_bound_from_config(self):
        orchestrator = LLMOrchestrator(OrchestratorConfig(max_conversation_history=2))
        orchestrator.memory.add_system_message("rules")
        for i in range(5):
            orchestrator.memory.add_user_message(f"u{i}")

        assert [m.content for m in orchestrator.memory.messages] == ["rules", "u3", "u4"]

    def test_execute_prompt(self, orchestrator):
        template = PromptTemplate("Hi {name}")
        assert orchestrator.execute_prompt(template, {"name": "Ada"}) == "Hi Ada"
        assert orchestrator.execute_prompt(template, name="Bob") == "Hi Bob"

    def test_execute_prompt_from_object(self, orchestrator):
        template = PromptTemplate("{name} is {age}")

        assert orchestrator.execute_prompt(template, Person("Ada", 36)) == "Ada is 36"
        with pytest.raises(TypeError):
            orchestrator.execute_prompt(template, Person("Ada", 36), age=40)

    @pytest.mark.asyncio
    async def test_execute_chain_retries_faults(self, orchestrator):
        step = FlakyStep(failures=2)
        chain = Chain().add_step(step)

        result = await orchestrator.execute_chain(chain, "input")

        assert result.success is True
        assert result.output == "input ok"
        assert step.calls == 3

    @pytest.mark.asyncio
    async def test_execute_chain_exhaustion(self, orchestrator):
        step = FlakyStep(failures=10)

        with pytest.raises(RetryError) as exc_info:
            await orchestrator.execute_chain(Chain().add_step(step), "input")

        assert step.calls == 3
        assert isinstance(exc_info.value.last_error, ConnectionError)

    @pytest.mark.asyncio
    async def test_soft_failure_is_returned_without_retry(self, orchestrator):
        failing = RecordingStep(success=False, error_message="invalid")
        chain = Chain().add_step(failing)

        result = await orchestrator.execute_chain(chain, "x")

        assert result.success is False
        assert result.error_message == "invalid"
        assert failing.call_count == 1

    @pytest.mark.asyncio
    async def test_soft_failures_retried_when_configured(self):
        orchestrator = LLMOrchestrator(
            OrchestratorConfig(retry_policy=FAST_POLICY, retry_soft_failures=True)
        )
        failing = RecordingStep(success=False, error_message="invalid")

        with pytest.raises(RetryError) as exc_info:
            await orchestrator.execute_chain(Chain().add_step(failing), "x")

        assert failing.call_count == 3
        assert isinstance(exc_info.value.last_error, StepFailedError)
        assert exc_info.value.last_error.result.error_message == "invalid"

    @pytest.mark.asyncio
    async def test_retryable_provider_error_retries_whole_chain(self, orchestrator):
        provider = FakeProvider([RateLimitError("slow down"), "Answer"])
        template_step = RecordingStep()
        chain = Chain().add_step(template_step).add_step(LLMStep(provider))

        result = await orchestrator.execute_chain(chain, "Question")

        assert result.output == "Answer"
        assert template_step.call_count == 2
        assert len(provider.calls) == 2

    @pytest.mark.asyncio
    async def test_execute_chain_streaming(self, orchestrator):
        chunks = []
        chain = (
            Chain()
            .add_step(FunctionStep(str.strip))
            .add_step(FunctionStep(str.title))
        )

        result = await orchestrator.execute_chain_streaming(chain, "  hello world ", chunks.append)

        assert chunks == ["hello world", "Hello World"]
        assert result.output == "Hello World"

    @pytest.mark.asyncio
    async def test_execute_tool(self, orchestrator):
        orchestrator.tools.register_tool(CalculatorTool())
        flaky = FlakyTool()
        orchestrator.tools.register_tool(flaky)

        assert await orchestrator.execute_tool("calculator", "6 * 7") == "42"
        assert await orchestrator.execute_tool("flaky", "abc") == "cba"
        assert flaky.calls == 2

    @pytest.mark.asyncio
    async def test_execute_unknown_tool(self, orchestrator):
        with pytest.raises(ToolNotFoundError):
            await orchestrator.execute_tool("missing", "x")

    @pytest.mark.asyncio
    async def test_execution_stats(self, orchestrator):
        await orchestrator.execute_chain(Chain(), "a")
        await orchestrator.execute_chain(
            Chain().add_step(RecordingStep(success=False, error_message="no")), "b"
        )
        orchestrator.tools.register_tool(CalculatorTool())

        stats = orchestrator.get_execution_stats()

        assert stats["total_executions"] == 2
        assert stats["successful"] == 1
        assert stats["failed"] == 1
        assert stats["success_rate"] == 0.5
        assert stats["registered_tools"] == ["calculator"]
        assert stats["memory_stats"]["messages_count"] == 0

    @pytest.mark.asyncio
    async def test_execution_history_is_bounded(self):
        orchestrator = LLMOrchestrator(
            OrchestratorConfig(retry_policy=FAST_POLICY, max_execution_history=3)
        )
        for i in range(5):
            await orchestrator.execute_chain(Chain(), f"run {i}")
        await orchestrator.execute_chain(
            Chain().add_step(RecordingStep(success=False, error_message="no")), "bad"
        )

        assert [r.output for r in orchestrator.execution_history][:2] == ["run 3", "run 4"]
        assert len(orchestrator.execution_history) == 3
        stats = orchestrator.get_execution_stats()
        assert stats["total_executions"] == 6
        assert stats["successful"] == 5
        assert stats["failed"] == 1


class TestWorkflowBuilder:
    @pytest.fixture
    def orchestrator(self):
        return LLMOrchestrator(OrchestratorConfig(retry_policy=FAST_POLICY))

    def test_create_workflow(self, orchestrator):
        assert isinstance(orchestrator.create_workflow(), WorkflowBuilder)

    @pytest.mark.asyncio
    async def test_prompt_seeds_input(self, orchestrator):
        step = RecordingStep()

        result = await (
            orchestrator.create_workflow()
            .with_prompt(PromptTemplate("Write about {topic}"))
            .with_variables({"topic": "retries"})
            .add_step(step)
            .execute()
        )

        assert step.inputs == ["Write about retries"]
        assert result.output == "Write about retries"

    @pytest.mark.asyncio
    async def test_explicit_input_wins(self, orchestrator):
        step = RecordingStep()
        workflow = (
            orchestrator.create_workflow()
            .with_prompt(PromptTemplate("{x}"))
            .with_variables({"x": "templated"})
            .add_step(step)
        )

        await workflow.execute("explicit")

        assert step.inputs == ["explicit"]

    @pytest.mark.asyncio
    async def test_missing_input_raises(self, orchestrator):
        workflow = orchestrator.create_workflow().with_prompt(PromptTemplate("{x}"))

        with pytest.raises(RuntimeError, match="No input provided"):
            await workflow.execute()

    @pytest.mark.asyncio
    async def test_streaming_when_enabled(self):
        orchestrator = LLMOrchestrator(
            OrchestratorConfig(retry_policy=FAST_POLICY, enable_streaming=True)
        )
        chunks = []

        await (
            orchestrator.create_workflow()
            .add_step(TemplateStep("[{input}]"))
            .add_step(FunctionStep(str.upper))
            .execute("go", on_chunk=chunks.append)
        )

        assert chunks == ["[go]", "[GO]"]

    @pytest.mark.asyncio
    async def test_streaming_disabled_ignores_callback(self, orchestrator):
        chunks = []

        result = await (
            orchestrator.create_workflow()
            .add_step(FunctionStep(str.upper))
            .execute("go", on_chunk=chunks.append)
        )

        assert result.output == "GO"
        assert chunks == []

    @pytest.mark.asyncio
    async def test_conversation_through_memory(self, orchestrator):
        provider = FakeProvider(["Nice to meet you", "Your name is Ada"])
        orchestrator.memory.add_system_message("You are helpful")
        step = LLMStep(provider, memory=orchestrator.memory)
        chain = Chain().add_step(step)

        await orchestrator.execute_chain(chain, "I am Ada")
        result = await orchestrator.execute_chain(chain, "What is my name?")

        assert result.output == "Your name is Ada"
        assert provider.calls[1]["messages"][:3] == [
            {"role": "system", "content": "You are helpful"},
            {"role": "user", "content": "I am Ada"},
            {"role": "assistant", "content": "Nice to meet you"},
        ]
        assert orchestrator.memory.get_stats()["conversation_messages"] == 4
