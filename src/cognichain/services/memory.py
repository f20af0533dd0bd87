"""Memory service for conversation history."""

import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..models.memory import Message, MessageRole

logger = logging.getLogger(__name__)

UNLIMITED = -1


class ConversationMemory:
    """Bounded conversation log that never trims system messages.

    ``max_messages`` bounds the number of non-system messages. A negative
    value (``UNLIMITED``) disables the bound, and ``0`` keeps only system
    messages. When the bound is exceeded the oldest non-system messages are
    dropped; everything that survives keeps its chronological position.
    """

    def __init__(self, max_messages: int = UNLIMITED):
        self.max_messages = max_messages
        self._messages: List[Message] = []
        self._lock = threading.Lock()
        self.created_at = datetime.now(timezone.utc)

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Snapshot of the stored messages, oldest first."""
        with self._lock:
            return tuple(self._messages)

    @property
    def is_bounded(self) -> bool:
        return self.max_messages >= 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def add_message(
        self, role: str, content: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Message:
        """Append a message and trim the history if it is over the bound."""
        message = Message(
            role=str(getattr(role, "value", role)),
            content=content,
            timestamp=datetime.now(timezone.utc),
            metadata=dict(metadata or {}),
        )
        with self._lock:
            self._messages.append(message)
            if self.is_bounded:
                self._trim()
        return message

    def add_user_message(self, content: str, metadata: Optional[Dict[str, Any]] = None) -> Message:
        return self.add_message(MessageRole.USER.value, content, metadata)

    def add_assistant_message(
        self, content: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Message:
        return self.add_message(MessageRole.ASSISTANT.value, content, metadata)

    def add_system_message(
        self, content: str, metadata: Optional[Dict[str, Any]] = None
    ) -> Message:
        return self.add_message(MessageRole.SYSTEM.value, content, metadata)

    def _trim(self) -> None:
        # Caller holds the lock.
        non_system = sum(1 for m in self._messages if not m.is_system)
        excess = non_system - self.max_messages
        if excess <= 0:
            return

        kept: List[Message] = []
        for message in self._messages:
            if excess > 0 and not message.is_system:
                excess -= 1
                continue
            kept.append(message)

        dropped = len(self._messages) - len(kept)
        self._messages = kept
        logger.debug(f"Trimmed {dropped} message(s) from conversation memory")

    def get_formatted_history(self) -> str:
        """Render the history as ``role: content`` lines."""
        return "\n".join(f"{m.role}: {m.content}" for m in self.messages)

    def clear(self) -> None:
        """Remove every message, system messages included."""
        with self._lock:
            self._messages.clear()

    def get_last_messages(self, count: int) -> List[Message]:
        """Return the final ``count`` messages in their original order."""
        if count <= 0:
            return []
        return list(self.messages[-count:])

    def get_messages_by_role(self, role: str) -> List[Message]:
        role = str(getattr(role, "value", role))
        return [m for m in self.messages if m.role == role]

    def to_chat_messages(self) -> List[Dict[str, str]]:
        """Get the history in OpenAI chat message format."""
        return [{"role": m.role, "content": m.content} for m in self.messages]

    def get_stats(self) -> Dict[str, Any]:
        """Get memory usage statistics."""
        messages = self.messages
        system_count = sum(1 for m in messages if m.is_system)
        return {
            "messages_count": len(messages),
            "system_messages": system_count,
            "conversation_messages": len(messages) - system_count,
            "max_messages": self.max_messages,
            "created_at": self.created_at.isoformat(),
        }
