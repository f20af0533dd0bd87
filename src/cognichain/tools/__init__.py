"""Built-in tools."""

from .base import BaseTool, Tool
from .calculator import CalculatorTool
from .http_fetch import HttpFetchTool

__all__ = [
    "BaseTool",
    "CalculatorTool",
    "HttpFetchTool",
    "Tool",
]
