"""Data models for CogniChain."""

from .base import ChainResult
from .config import OrchestratorConfig, RetryPolicy
from .memory import Message, MessageRole

__all__ = [
    "ChainResult",
    "Message",
    "MessageRole",
    "OrchestratorConfig",
    "RetryPolicy",
]
