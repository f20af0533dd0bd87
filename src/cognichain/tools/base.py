"""Tool contract and an optional convenience base class."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Tool(Protocol):
    """Anything with a name, a description and an async ``execute``."""

    name: str
    description: str

    async def execute(self, input_text: str) -> str:
        ...


class BaseTool(ABC):
    """Base class for tools that want timing logs and metadata validation.

    Subclasses implement ``_execute``. Registration does not require this
    class; any object satisfying ``Tool`` can be registered.
    """

    name: str = ""
    description: str = ""

    def __init__(self):
        self._validate_metadata()

    def _validate_metadata(self):
        """Validate that metadata is properly configured."""
        if not self.name:
            raise ValueError("Tool must have a name")
        if not self.description:
            raise ValueError("Tool must have a description")

    @abstractmethod
    async def _execute(self, input_text: str) -> str:
        """Run the tool logic."""

    async def execute(self, input_text: str) -> str:
        """Run the tool and log how long it took."""
        start_time = time.time()
        logger.info(f"Executing tool: {self.name}")
        try:
            return await self._execute(input_text)
        finally:
            execution_time = (time.time() - start_time) * 1000
            logger.debug(f"Tool {self.name} finished in {execution_time:.1f}ms")
