"""Base models for chain steps and their results."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ChainResult:
    """Result produced by a chain step or by a whole chain run."""

    output: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    success: bool = True
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, output: str, metadata: Optional[Dict[str, Any]] = None) -> "ChainResult":
        """Build a successful result."""
        return cls(output=output, metadata=dict(metadata or {}), success=True)

    @classmethod
    def fail(
        cls,
        error_message: str,
        output: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ChainResult":
        """Build a failed result carrying a human-readable error."""
        return cls(
            output=output,
            metadata=dict(metadata or {}),
            success=False,
            error_message=error_message,
        )
