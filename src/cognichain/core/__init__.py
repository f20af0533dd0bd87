"""Core components of CogniChain."""

from .chain import Chain, ChainStep
from .orchestrator import LLMOrchestrator, StepFailedError, WorkflowBuilder
from .prompt import PromptTemplate
from .registry import ToolNotFoundError, ToolRegistry

__all__ = [
    "Chain",
    "ChainStep",
    "LLMOrchestrator",
    "PromptTemplate",
    "StepFailedError",
    "ToolNotFoundError",
    "ToolRegistry",
    "WorkflowBuilder",
]
