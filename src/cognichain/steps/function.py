"""Steps built from plain callables."""

import inspect
from typing import Any, Callable, Optional

from ..models.base import ChainResult


class FunctionStep:
    """Adapts a sync or async callable into a chain step.

    The callable takes the step input. A ``str`` return value becomes a
    successful result; a ``ChainResult`` is passed through untouched.
    """

    def __init__(self, func: Callable[[str], Any], name: Optional[str] = None):
        if not callable(func):
            raise TypeError("func must be callable")
        self.func = func
        self.name = name or getattr(func, "__name__", type(func).__name__)

    async def execute(self, input_text: str) -> ChainResult:
        value = self.func(input_text)
        if inspect.isawaitable(value):
            value = await value

        if isinstance(value, ChainResult):
            return value
        return ChainResult.ok(str(value), {"step": self.name})

    def __repr__(self) -> str:
        return f"FunctionStep({self.name!r})"
