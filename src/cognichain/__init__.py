"""CogniChain - lightweight orchestration toolkit for LLM applications."""

__version__ = "1.0.0"

from .core.chain import Chain, ChainStep
from .core.orchestrator import LLMOrchestrator, StepFailedError, WorkflowBuilder
from .core.prompt import PromptTemplate
from .core.registry import ToolNotFoundError, ToolRegistry
from .models import ChainResult, Message, MessageRole, OrchestratorConfig, RetryPolicy
from .services import (
    ConversationMemory,
    RetryError,
    RetryHandler,
    StreamingHandler,
    StreamingResponse,
    retry_async,
    simulate_stream,
)
from .tools.base import BaseTool, Tool

__all__ = [
    "BaseTool",
    "Chain",
    "ChainResult",
    "ChainStep",
    "ConversationMemory",
    "LLMOrchestrator",
    "Message",
    "MessageRole",
    "OrchestratorConfig",
    "PromptTemplate",
    "RetryError",
    "RetryHandler",
    "RetryPolicy",
    "StepFailedError",
    "StreamingHandler",
    "StreamingResponse",
    "Tool",
    "ToolNotFoundError",
    "ToolRegistry",
    "WorkflowBuilder",
    "retry_async",
    "simulate_stream",
]
