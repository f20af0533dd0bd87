"""Ready-made chain steps."""

from .function import FunctionStep
from .llm import LLMStep
from .template import TemplateStep

__all__ = ["FunctionStep", "LLMStep", "TemplateStep"]
