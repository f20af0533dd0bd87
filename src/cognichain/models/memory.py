"""Memory-related data models."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class MessageRole(str, Enum):
    """Well-known message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""

    role: str  # "user", "assistant", "system" or a custom tag
    content: str
    timestamp: datetime = field(default_factory=_utcnow)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_system(self) -> bool:
        return self.role == MessageRole.SYSTEM.value
