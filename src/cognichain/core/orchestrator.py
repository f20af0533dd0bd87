"""Orchestrator composing chains, retries, memory and tools."""

import logging
from collections import deque
from typing import Any, Deque, Dict, Mapping, Optional

from ..models.base import ChainResult
from ..models.config import OrchestratorConfig
from ..services.memory import ConversationMemory
from ..services.retry import RetryHandler
from ..services.streaming import ChunkCallback
from .chain import Chain, ChainStep
from .prompt import PromptTemplate
from .registry import ToolNotFoundError, ToolRegistry

logger = logging.getLogger(__name__)


class StepFailedError(Exception):
    """A soft step failure promoted to an exception so it can be retried."""

    def __init__(self, result: ChainResult):
        super().__init__(result.error_message or "Chain step failed")
        self.result = result


class LLMOrchestrator:
    """Single entry point over memory, tools and retried chain execution."""

    def __init__(
        self,
        config: Optional[OrchestratorConfig] = None,
        tool_registry: Optional[ToolRegistry] = None,
        memory: Optional[ConversationMemory] = None,
    ):
        self.config = config or OrchestratorConfig()
        self.memory = memory or ConversationMemory(self.config.max_conversation_history)
        self.tools = tool_registry or ToolRegistry()
        self.retry_handler = RetryHandler(
            self.config.retry_policy, is_retryable=self._is_retryable
        )
        self.execution_history: Deque[ChainResult] = deque(
            maxlen=self.config.max_execution_history
        )
        self.total_executions = 0
        self.successful_executions = 0

    @staticmethod
    def _is_retryable(error: Exception) -> bool:
        return not isinstance(error, ToolNotFoundError)

    def execute_prompt(
        self,
        template: PromptTemplate,
        variables: Any = None,
        **kwargs: Any,
    ) -> str:
        """Format ``template`` from a mapping or from an object's attributes."""
        if variables is not None and not isinstance(variables, Mapping):
            if kwargs:
                raise TypeError("Keyword values cannot be combined with an object")
            return template.format_object(variables)
        return template.format(variables, **kwargs)

    async def execute_chain(self, chain: Chain, input_text: str) -> ChainResult:
        """Run ``chain`` under the configured retry policy."""
        return await self._execute(chain, input_text, streaming=False, on_chunk=None)

    async def execute_chain_streaming(
        self, chain: Chain, input_text: str, on_chunk: Optional[ChunkCallback] = None
    ) -> ChainResult:
        return await self._execute(chain, input_text, streaming=True, on_chunk=on_chunk)

    async def _execute(
        self,
        chain: Chain,
        input_text: str,
        streaming: bool,
        on_chunk: Optional[ChunkCallback],
    ) -> ChainResult:
        async def attempt() -> ChainResult:
            if streaming:
                result = await chain.run_streaming(input_text, on_chunk)
            else:
                result = await chain.run(input_text)
            if not result.success and self.config.retry_soft_failures:
                raise StepFailedError(result)
            return result

        logger.info(f"Executing chain with {len(chain)} step(s)")
        result = await self.retry_handler.execute(attempt)
        self.execution_history.append(result)
        self.total_executions += 1
        if result.success:
            self.successful_executions += 1

        if result.success:
            logger.info("Chain completed successfully")
        else:
            logger.info(f"Chain returned a failure: {result.error_message}")
        return result

    async def execute_tool(self, name: str, input_text: str) -> str:
        """Run a registered tool under the retry policy.

        Raises:
            ToolNotFoundError: If no tool is registered as ``name``.
        """
        tool = self.tools.get_tool(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return await self.retry_handler.execute(tool.execute, input_text)

    def create_workflow(self) -> "WorkflowBuilder":
        return WorkflowBuilder(self)

    def get_execution_stats(self) -> Dict[str, Any]:
        """Get statistics about chain executions."""
        total = self.total_executions
        successful = self.successful_executions
        return {
            "total_executions": total,
            "successful": successful,
            "failed": total - successful,
            "success_rate": successful / total if total > 0 else 0,
            "registered_tools": self.tools.list_tools(),
            "memory_stats": self.memory.get_stats(),
        }


class WorkflowBuilder:
    """Fluent builder for a prompt-seeded chain run by an orchestrator."""

    def __init__(self, orchestrator: LLMOrchestrator):
        self._orchestrator = orchestrator
        self._chain = Chain.create()
        self._template: Optional[PromptTemplate] = None
        self._variables: Optional[Dict[str, Any]] = None

    @property
    def chain(self) -> Chain:
        return self._chain

    def with_prompt(self, template: PromptTemplate) -> "WorkflowBuilder":
        self._template = template
        return self

    def with_variables(self, variables: Mapping[str, Any]) -> "WorkflowBuilder":
        self._variables = dict(variables)
        return self

    def add_step(self, step: ChainStep) -> "WorkflowBuilder":
        self._chain.add_step(step)
        return self

    async def execute(
        self,
        initial_input: Optional[str] = None,
        on_chunk: Optional[ChunkCallback] = None,
    ) -> ChainResult:
        """Run the workflow.

        Without ``initial_input`` the configured template is formatted with the
        configured variables and used as the input.

        Raises:
            RuntimeError: If there is neither an input nor a template with
                variables.
        """
        input_text = initial_input
        if input_text is None and self._template is not None and self._variables is not None:
            input_text = self._orchestrator.execute_prompt(self._template, self._variables)

        if input_text is None:
            raise RuntimeError(
                "No input provided. Set initial_input or configure a prompt template with variables."
            )

        if self._orchestrator.config.enable_streaming and on_chunk is not None:
            return await self._orchestrator.execute_chain_streaming(
                self._chain, input_text, on_chunk
            )
        return await self._orchestrator.execute_chain(self._chain, input_text)
