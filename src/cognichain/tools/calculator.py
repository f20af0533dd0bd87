"""Arithmetic tool backed by a restricted expression evaluator."""

import ast
import logging
import math
import operator
from typing import Any, Callable, Dict

from .base import BaseTool

logger = logging.getLogger(__name__)

_BINARY_OPS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: operator.pow,
}

_UNARY_OPS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}

_FUNCTIONS: Dict[str, Callable[..., Any]] = {
    "abs": abs,
    "round": round,
    "min": min,
    "max": max,
    "sqrt": math.sqrt,
}

_CONSTANTS = {"pi": math.pi, "e": math.e}

MAX_EXPONENT = 1000
MAX_MAGNITUDE = 10 ** MAX_EXPONENT


def evaluate(expression: str) -> float:
    """Evaluate an arithmetic expression without using ``eval``.

    Raises:
        ValueError: For syntax errors or anything other than numbers,
            arithmetic operators and the whitelisted functions.
    """
    try:
        tree = ast.parse(expression.strip(), mode="eval")
    except SyntaxError as e:
        raise ValueError(f"Invalid expression: {expression!r}") from e
    return _eval_node(tree.body)


def _eval_node(node: ast.AST) -> Any:
    if (
        isinstance(node, ast.Constant)
        and isinstance(node.value, (int, float))
        and not isinstance(node.value, bool)
    ):
        return node.value
    if isinstance(node, ast.Name) and node.id in _CONSTANTS:
        return _CONSTANTS[node.id]
    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPS:
        left, right = _eval_node(node.left), _eval_node(node.right)
        if isinstance(node.op, ast.Pow):
            _check_power(left, right)
        result = _BINARY_OPS[type(node.op)](left, right)
        if isinstance(result, int) and abs(result) > MAX_MAGNITUDE:
            raise ValueError("Result too large")
        return result
    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPS:
        return _UNARY_OPS[type(node.op)](_eval_node(node.operand))
    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCTIONS
        and not node.keywords
    ):
        return _FUNCTIONS[node.func.id](*(_eval_node(arg) for arg in node.args))
    raise ValueError(f"Unsupported expression element: {type(node).__name__}")


def _check_power(base: Any, exponent: Any) -> None:
    """Reject powers whose result would exceed MAX_MAGNITUDE before computing them."""
    if abs(exponent) > MAX_EXPONENT:
        raise ValueError("Exponent too large")
    if exponent > 0 and abs(base) > 1 and exponent * math.log10(abs(base)) > MAX_EXPONENT:
        raise ValueError("Result too large")


class CalculatorTool(BaseTool):
    """Evaluates arithmetic such as ``2 * (3 + 4)``."""

    name = "calculator"
    description = "Evaluates a mathematical expression, e.g. '2 * (3 + 4)' or 'sqrt(16)'"

    async def _execute(self, input_text: str) -> str:
        try:
            result = evaluate(input_text)
        except ZeroDivisionError as e:
            raise ValueError("Division by zero") from e
        except OverflowError as e:
            raise ValueError("Result too large") from e

        if isinstance(result, float) and result.is_integer():
            result = int(result)
        logger.debug(f"calculator: {input_text!r} = {result}")
        return str(result)
