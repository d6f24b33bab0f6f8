from __future__ import annotations

import dataclasses
import logging
import math
import re
import typing as t

import sympy as sp
from sympy.parsing.sympy_parser import parse_expr, standard_transformations

from backend.errors import ExpressionError
from backend.expression import normalize

logger = logging.getLogger(__name__)

X = sp.Symbol("x")

PROBE_POINTS = (-2.0, -1.0, 0.0, 1.0, 2.0)
DEFAULT_DOMAIN = (-10.0, 10.0)
DEFAULT_STEP = 0.1
PADDING = 0.1

# parse_expr evals its input, and the input comes from the remote service.
_ALLOWED = re.compile(r"[0-9A-Za-z_+\-*/().,\s]*")

Point = tuple[float, float]


@dataclasses.dataclass(frozen=True)
class SampledCurve:
    points: list[Point]
    y_domain: tuple[float, float] | None

    @property
    def plottable(self) -> bool:
        return bool(self.points)

    def to_dict(self) -> dict[str, t.Any]:
        return {
            "points": [[x, y] for x, y in self.points],
            "yDomain": list(self.y_domain) if self.y_domain else None,
        }


@dataclasses.dataclass(frozen=True)
class Plot:
    expression: str
    constants_fixed: bool
    curve: SampledCurve

    def to_dict(self) -> dict[str, t.Any]:
        out = {"expression": self.expression, "constantsFixed": self.constants_fixed}
        out.update(self.curve.to_dict())
        return out


def compile_expression(expr: str) -> t.Callable[[float], t.Any]:
    """Parse ``expr`` over the single variable ``x`` and return a float evaluator."""
    if not expr or not expr.strip():
        raise ExpressionError("Empty expression")
    if "__" in expr or not _ALLOWED.fullmatch(expr):
        raise ExpressionError(f"Expression {expr!r} contains unsupported characters")
    try:
        parsed = parse_expr(expr, local_dict={"x": X}, transformations=standard_transformations)
    except Exception as e:
        raise ExpressionError(f"Could not parse expression {expr!r}: {e}") from e
    if not isinstance(parsed, sp.Expr):
        raise ExpressionError(f"Expression {expr!r} is not a scalar expression")
    return sp.lambdify(X, parsed, modules="math")


def _evaluate(fn: t.Callable[[float], t.Any], x: float) -> float | None:
    try:
        y = float(fn(x))
    except (ArithmeticError, ValueError, TypeError, NameError):
        return None
    if not math.isfinite(y):
        return None
    return y


def padded_range(ys: list[float]) -> tuple[float, float]:
    lo = min(ys)
    hi = max(ys)
    pad = PADDING * (hi - lo)
    return lo - pad, hi + pad


def sample(
    expr: str,
    domain: tuple[float, float] = DEFAULT_DOMAIN,
    step: float = DEFAULT_STEP,
) -> SampledCurve:
    """Evaluate ``expr`` on ``domain`` (inclusive), keeping only finite samples.

    Raises ExpressionError when ``expr`` does not parse. An expression that
    parses but cannot be evaluated gives an empty curve.
    """
    lo, hi = float(domain[0]), float(domain[1])
    if step <= 0:
        raise ValueError("step must be positive")
    if hi < lo:
        raise ValueError("domain must be increasing")

    fn = compile_expression(expr)

    if all(_evaluate(fn, p) is None for p in PROBE_POINTS):
        logger.info("Expression %r is not evaluable at any probe point", expr)
        return SampledCurve(points=[], y_domain=None)

    # Count steps instead of accumulating floats so the upper bound is hit exactly.
    n = int(math.floor((hi - lo) / step + 1e-9))
    xs = [round(lo + i * step, 10) for i in range(n + 1)]

    points: list[Point] = []
    for x in xs:
        y = _evaluate(fn, x)
        if y is not None:
            points.append((x, y))

    if not points:
        return SampledCurve(points=[], y_domain=None)

    logger.debug("Sampled %d of %d points for %r", len(points), len(xs), expr)
    return SampledCurve(points=points, y_domain=padded_range([y for _, y in points]))


def plot_answer(
    answer_text: str,
    domain: tuple[float, float] = DEFAULT_DOMAIN,
    step: float = DEFAULT_STEP,
) -> Plot | None:
    normalized = normalize(answer_text)
    try:
        curve = sample(normalized.expression, domain=domain, step=step)
    except ValueError as e:
        logger.info("No plot for answer %r: %s", answer_text, e)
        return None
    if not curve.plottable:
        return None
    return Plot(
        expression=normalized.expression,
        constants_fixed=normalized.constants_fixed,
        curve=curve,
    )
