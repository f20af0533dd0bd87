"""Tool registry for name-keyed tool lookup and dispatch."""

import importlib
import inspect
import logging
import pkgutil
from types import ModuleType
from typing import Dict, List, Optional, Union

from ..tools.base import BaseTool, Tool

logger = logging.getLogger(__name__)


class ToolNotFoundError(KeyError):
    """Raised when a tool name is not registered."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Tool '{self.name}' not found."


class ToolRegistry:
    """Registry for discovering and managing tools."""

    def __init__(self):
        self._tools: Dict[str, Tool] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    @staticmethod
    def _check_tool(tool: Tool) -> None:
        if tool is None:
            raise ValueError("tool cannot be None")
        if not isinstance(tool, Tool):
            raise TypeError(f"{type(tool).__name__} does not implement the tool interface")

    def register_tool(self, tool: Tool) -> None:
        """Register a tool under its name.

        Raises:
            ValueError: If a tool with the same name is already registered.
        """
        self._check_tool(tool)
        if tool.name in self._tools:
            raise ValueError(f"A tool with the name '{tool.name}' is already registered.")
        self._tools[tool.name] = tool
        logger.info(f"Registered tool: {tool.name}")

    def update_tool(self, tool: Tool) -> None:
        """Replace an already registered tool with the same name."""
        self._check_tool(tool)
        if tool.name not in self._tools:
            raise ValueError(f"Cannot update tool '{tool.name}' because it is not registered.")
        self._tools[tool.name] = tool
        logger.info(f"Updated tool: {tool.name}")

    def unregister_tool(self, name: str) -> Tool:
        try:
            tool = self._tools.pop(name)
        except KeyError:
            raise ToolNotFoundError(name) from None
        logger.info(f"Unregistered tool: {name}")
        return tool

    def get_tool(self, name: str) -> Optional[Tool]:
        """Get a tool instance by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[str]:
        """List all registered tool names."""
        return list(self._tools.keys())

    def get_all_tools(self) -> Dict[str, Tool]:
        """Get all registered tools."""
        return self._tools.copy()

    async def execute_tool(self, name: str, input_text: str) -> str:
        tool = self.get_tool(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return await tool.execute(input_text)

    def get_tool_descriptions(self) -> str:
        """One ``- name: description`` line per tool, suitable for prompts."""
        return "\n".join(f"- {t.name}: {t.description}" for t in self._tools.values())

    def discover_tools(self, package: Union[str, ModuleType] = "cognichain.tools") -> List[str]:
        """Import every module of ``package`` and register its BaseTool subclasses.

        Only classes defined in the scanned modules that can be built without
        arguments are registered; names that are already taken are skipped.
        """
        if isinstance(package, str):
            package = importlib.import_module(package)

        logger.info(f"Discovering tools in {package.__name__}")
        registered: List[str] = []

        for module_info in pkgutil.iter_modules(package.__path__):
            if module_info.name.startswith("_") or module_info.name == "base":
                continue

            module_name = f"{package.__name__}.{module_info.name}"
            try:
                module = importlib.import_module(module_name)
            except ImportError as e:
                logger.error(f"Failed to import tool module {module_name}: {e}")
                continue

            for name, obj in inspect.getmembers(module, inspect.isclass):
                if (
                    not issubclass(obj, BaseTool)
                    or obj is BaseTool
                    or inspect.isabstract(obj)
                    or obj.__module__ != module.__name__
                ):
                    continue

                try:
                    tool = obj()
                except TypeError as e:
                    logger.debug(f"Skipping tool class {name}: {e}")
                    continue

                if tool.name in self._tools:
                    logger.warning(f"Tool {tool.name} already registered, skipping")
                    continue

                self.register_tool(tool)
                registered.append(tool.name)

        return registered
