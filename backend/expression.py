"""Turn the service's plaintext answer into an expression in ``x`` that SymPy can parse.

The rewrite is a fixed sequence of regex rules. A rule that does not match
leaves the text unchanged; nothing here evaluates the result.
"""
from __future__ import annotations

import dataclasses
import logging
import re

logger = logging.getLogger(__name__)

_FUNCTION_RHS = re.compile(r"\b[a-zA-Z]\w*\s*\([^()=]*\)\s*=\s*([^=]+)$")
_BARE_RHS = re.compile(r"\b[a-zA-Z]\w*\s*=\s*([^=]+)$")
_LAST_RHS = re.compile(r"=\s*([^=]*)$")

_CONSTANT = re.compile(r"(?<![A-Za-z_])[cC](?:_?\d+)?\b")

_UNICODE = {
    "−": "-",
    "×": "*",
    "·": "*",
    "π": "pi",
}

_EXP_GROUP = re.compile(r"(?<![A-Za-z_.])e\s*\^\s*\(")
_EXP_TOKEN = re.compile(r"(?<![A-Za-z_.])e\s*\^\s*(-?[\w.]+)")
_EULER = re.compile(r"\be\b(?!\s*\()")
_CARET = re.compile(r"\s*\^\s*")

_DIGIT_FUNCTION = re.compile(r"\b(\d+(?:\.\d+)?)\s*(?=[A-Za-z_]\w*\s*\()")
_DIGIT_VARIABLE = re.compile(r"\b(\d+(?:\.\d+)?)\s*(?=[A-Za-z_])")
_DIGIT_GROUP = re.compile(r"\b(\d+(?:\.\d+)?)\s*(?=\()")
_ADJACENT_GROUPS = re.compile(r"\)\s*\(")
_GROUP_OPERAND = re.compile(r"\)\s*(?=[A-Za-z_\d])")
_JUXTAPOSED = re.compile(r"([A-Za-z_]\w*|\d+(?:\.\d+)?)\s+(?=[A-Za-z_(\d])")

FUNCTION_NAMES = frozenset(
    {
        "sin", "cos", "tan", "cot", "sec", "csc",
        "asin", "acos", "atan", "sinh", "cosh", "tanh",
        "exp", "log", "ln", "sqrt", "abs", "Abs",
    }
)


@dataclasses.dataclass(frozen=True)
class NormalizedExpression:
    expression: str
    constants_fixed: bool


def extract_rhs(text: str) -> str:
    lines = text.strip().splitlines()
    line = lines[0].strip() if lines else ""
    for pattern in (_FUNCTION_RHS, _BARE_RHS, _LAST_RHS):
        m = pattern.search(line)
        if m:
            return m.group(1).strip()
    return line


def _constant(m: re.Match[str]) -> str:
    # A coefficient written against the constant (3c) keeps its product.
    before = m.string[m.start() - 1] if m.start() > 0 else ""
    return "*1" if before and (before.isdigit() or before == ")") else "1"


def fix_constants(expr: str) -> tuple[str, bool]:
    out, n = _CONSTANT.subn(_constant, expr)
    return out, n > 0


def _juxtaposed(m: re.Match[str]) -> str:
    token = m.group(1)
    if token in FUNCTION_NAMES:
        return m.group(0)
    return token + "*"


def to_evaluator_syntax(expr: str) -> str:
    for src, dst in _UNICODE.items():
        expr = expr.replace(src, dst)

    expr = _EXP_GROUP.sub("exp(", expr)
    expr = _EXP_TOKEN.sub(r"exp(\1)", expr)
    expr = _EULER.sub("E", expr)
    expr = _CARET.sub("**", expr)

    expr = _DIGIT_FUNCTION.sub(r"\1*", expr)
    expr = _DIGIT_VARIABLE.sub(r"\1*", expr)
    expr = _DIGIT_GROUP.sub(r"\1*", expr)
    expr = _ADJACENT_GROUPS.sub(")*(", expr)
    expr = _GROUP_OPERAND.sub(")*", expr)
    expr = _JUXTAPOSED.sub(_juxtaposed, expr)
    return expr.strip()


def balance_parentheses(expr: str) -> str:
    missing = expr.count("(") - expr.count(")")
    if missing > 0:
        return expr + ")" * missing
    return expr


def normalize(answer_text: str) -> NormalizedExpression:
    rhs = extract_rhs(answer_text)
    rhs, constants_fixed = fix_constants(rhs)
    expr = balance_parentheses(to_evaluator_syntax(rhs))
    logger.debug("Normalized %r -> %r (constants fixed: %s)", answer_text, expr, constants_fixed)
    return NormalizedExpression(expression=expr, constants_fixed=constants_fixed)
