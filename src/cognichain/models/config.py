"""Configuration models for retries and the orchestrator."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff settings.

    ``max_retries`` is the total number of attempts, so the first call counts
    toward it. Delays are whole milliseconds.
    """

    max_retries: int = 3
    initial_delay_ms: int = 1000
    backoff_multiplier: float = 2.0
    max_delay_ms: int = 30000
    use_jitter: bool = True

    def __post_init__(self):
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.initial_delay_ms < 0:
            raise ValueError("initial_delay_ms must be >= 0")
        if self.max_delay_ms < 0:
            raise ValueError("max_delay_ms must be >= 0")
        if self.backoff_multiplier < 1:
            raise ValueError("backoff_multiplier must be >= 1")

    @classmethod
    def default(cls) -> "RetryPolicy":
        return cls()


@dataclass
class OrchestratorConfig:
    """Settings for an LLMOrchestrator."""

    retry_policy: RetryPolicy = field(default_factory=RetryPolicy.default)
    max_conversation_history: int = 10
    enable_streaming: bool = False
    retry_soft_failures: bool = False
    # Recent chain results kept in execution_history; stats count every run
    max_execution_history: int = 100
