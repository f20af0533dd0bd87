"""Sequential chain execution."""

import inspect
import logging
from typing import Any, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from ..models.base import ChainResult
from ..services.streaming import ChunkCallback

logger = logging.getLogger(__name__)


@runtime_checkable
class ChainStep(Protocol):
    """A single unit of work: text in, ChainResult out."""

    async def execute(self, input_text: str) -> ChainResult:
        ...


class Chain:
    """Ordered list of steps run one after another.

    Each step receives the previous step's output. Metadata from successful
    steps is merged (later keys win). The first result with ``success=False``
    is returned unchanged and the remaining steps are skipped. Exceptions
    raised by a step are not caught.
    """

    def __init__(self):
        self._steps: List[ChainStep] = []
        self._active_runs = 0

    @classmethod
    def create(cls) -> "Chain":
        return cls()

    @property
    def steps(self) -> Tuple[ChainStep, ...]:
        return tuple(self._steps)

    @property
    def is_running(self) -> bool:
        return self._active_runs > 0

    def __len__(self) -> int:
        return len(self._steps)

    def add_step(self, step: ChainStep) -> "Chain":
        """Append a step and return the chain for fluent building."""
        if step is None:
            raise ValueError("step cannot be None")
        if not callable(getattr(step, "execute", None)):
            raise TypeError(f"{type(step).__name__} does not implement execute()")
        if self.is_running:
            raise RuntimeError("Cannot add steps while the chain is running")
        self._steps.append(step)
        return self

    async def run(self, initial_input: str) -> ChainResult:
        return await self._run(initial_input, None)

    async def run_streaming(
        self, initial_input: str, on_chunk: Optional[ChunkCallback] = None
    ) -> ChainResult:
        """Like ``run``, but passes each successful step's output to ``on_chunk``."""
        return await self._run(initial_input, on_chunk)

    async def _run(self, initial_input: str, on_chunk: Optional[ChunkCallback]) -> ChainResult:
        steps = tuple(self._steps)
        current = initial_input
        metadata: Dict[str, Any] = {}

        self._active_runs += 1
        try:
            logger.debug(f"Running chain with {len(steps)} step(s)")
            for index, step in enumerate(steps):
                result = await step.execute(current)

                if not result.success:
                    logger.info(
                        f"Chain stopped at step {index} ({type(step).__name__}): "
                        f"{result.error_message}"
                    )
                    return result

                current = result.output
                if on_chunk is not None:
                    outcome = on_chunk(result.output)
                    if inspect.isawaitable(outcome):
                        await outcome

                metadata.update(result.metadata)
        finally:
            self._active_runs -= 1

        return ChainResult(output=current, metadata=metadata, success=True)
