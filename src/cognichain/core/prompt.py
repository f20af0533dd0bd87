"""Parameterized prompt templates."""

import dataclasses
import re
from typing import Any, Dict, List, Mapping, Optional

_PLACEHOLDER = re.compile(r"\{([^{}]+)\}")


class PromptTemplate:
    """Template with ``{name}`` placeholders.

    Placeholders whose name was not supplied to ``format`` are left as they
    are, so literal braces in surrounding text survive formatting.
    """

    def __init__(self, template: str):
        if template is None:
            raise ValueError("template cannot be None")
        self._template = template
        self._variables = self._extract_variables(template)

    @property
    def template(self) -> str:
        return self._template

    @property
    def variables(self) -> List[str]:
        """Variable names in order of first appearance."""
        return list(self._variables)

    @classmethod
    def from_string(cls, template: str) -> "PromptTemplate":
        return cls(template)

    def format(self, variables: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> str:
        """Substitute every placeholder.

        Raises:
            ValueError: If a variable used by the template has no value.
        """
        values: Dict[str, str] = {k: str(v) for k, v in (variables or {}).items()}
        values.update({k: str(v) for k, v in kwargs.items()})

        for name in self._variables:
            if name not in values:
                raise ValueError(f"Missing value for variable: {name}")

        def substitute(match: "re.Match[str]") -> str:
            name = match.group(1)
            return values[name] if name in values else match.group(0)

        return _PLACEHOLDER.sub(substitute, self._template)

    def format_object(self, obj: Any) -> str:
        """Format using the attributes of a dataclass or plain object."""
        if obj is None:
            raise ValueError("obj cannot be None")
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            fields = {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
        else:
            fields = dict(vars(obj))
        return self.format({k: "" if v is None else v for k, v in fields.items()})

    @staticmethod
    def _extract_variables(template: str) -> List[str]:
        names: List[str] = []
        for match in _PLACEHOLDER.finditer(template):
            name = match.group(1)
            if name.strip() and name not in names:
                names.append(name)
        return names

    def __repr__(self) -> str:
        return f"PromptTemplate({self._template!r})"
