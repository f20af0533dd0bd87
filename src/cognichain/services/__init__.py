"""Service components for CogniChain."""

from .memory import ConversationMemory
from .retry import RetryError, RetryHandler, retry_async
from .streaming import StreamingHandler, StreamingResponse, simulate_stream

__all__ = [
    "ConversationMemory",
    "RetryError",
    "RetryHandler",
    "StreamingHandler",
    "StreamingResponse",
    "retry_async",
    "simulate_stream",
]
