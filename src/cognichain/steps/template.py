"""Step that renders a prompt template around its input."""

from typing import Any, Mapping, Optional, Union

from ..core.prompt import PromptTemplate
from ..models.base import ChainResult


class TemplateStep:
    """Formats ``template`` with the step input bound to ``input_variable``."""

    def __init__(
        self,
        template: Union[str, PromptTemplate],
        input_variable: str = "input",
        variables: Optional[Mapping[str, Any]] = None,
    ):
        self.template = template if isinstance(template, PromptTemplate) else PromptTemplate(template)
        self.input_variable = input_variable
        self.variables = dict(variables or {})

    async def execute(self, input_text: str) -> ChainResult:
        values = {**self.variables, self.input_variable: input_text}
        try:
            prompt = self.template.format(values)
        except ValueError as e:
            return ChainResult.fail(str(e), output=input_text)
        return ChainResult.ok(prompt, {"template_variables": self.template.variables})
