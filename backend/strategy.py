from __future__ import annotations

import dataclasses
import logging
import typing as t

from backend.config import CONDITION_TEMPLATE, PHRASE_TEMPLATES, PLOT_FALLBACK_TEMPLATE
from backend.errors import InvalidEquationError, NoSolutionError
from backend.locators import Graphic, locate_answer, locate_classification, locate_graphic
from backend.sections import QueryResult

logger = logging.getLogger(__name__)

NO_SOLUTION_MESSAGE = (
    "Could not find a solution for this equation. "
    "Please try a different formulation or a simpler equation."
)


class SolverClient(t.Protocol):
    def query(self, text: str) -> QueryResult: ...

    def fetch_bytes(self, url: str) -> bytes: ...


@dataclasses.dataclass(frozen=True)
class Resolution:
    answer: str
    graphic: Graphic | None
    classification: str | None
    query: str


def build_phrases(
    equation: str,
    initial_condition: str | None = None,
    templates: t.Sequence[str] = PHRASE_TEMPLATES,
) -> list[str]:
    phrases = [tpl.format(equation=equation) for tpl in templates]
    if initial_condition:
        phrases = [CONDITION_TEMPLATE.format(phrase=p, condition=initial_condition) for p in phrases]
    return phrases


class QueryStrategy:
    """Try each phrasing in turn until the solver returns a locatable answer."""

    def __init__(
        self,
        client: SolverClient,
        *,
        templates: t.Sequence[str] = PHRASE_TEMPLATES,
        plot_fallback_template: str = PLOT_FALLBACK_TEMPLATE,
    ) -> None:
        self.client = client
        self.templates = tuple(templates)
        self.plot_fallback_template = plot_fallback_template

    def resolve(self, equation: str, initial_condition: str | None = None) -> Resolution:
        equation = (equation or "").strip()
        if not equation:
            raise InvalidEquationError("An equation is required.")
        condition = (initial_condition or "").strip() or None

        answer: str | None = None
        graphic: Graphic | None = None
        classification: str | None = None
        used_query = ""

        for phrase in build_phrases(equation, condition, self.templates):
            logger.info("Trying query: %s", phrase)
            result = self.client.query(phrase)
            if not result.success:
                continue
            if not result.sections:
                logger.info("No pods in response for %r", phrase)
                continue
            answer = locate_answer(result.sections)
            graphic = locate_graphic(result.sections, self.client.fetch_bytes)
            classification = locate_classification(result.sections)
            if answer:
                used_query = phrase
                logger.info("Solution found: %s", answer)
                break

        if not answer:
            logger.error("No solution found for %r in any response", equation)
            raise NoSolutionError(NO_SOLUTION_MESSAGE)

        if graphic is None:
            graphic = self._fallback_graphic(equation)

        return Resolution(
            answer=answer,
            graphic=graphic,
            classification=classification,
            query=used_query,
        )

    def _fallback_graphic(self, equation: str) -> Graphic | None:
        phrase = self.plot_fallback_template.format(equation=equation)
        logger.info("No plot with the solution; trying %r", phrase)
        result = self.client.query(phrase)
        if not result.success or not result.sections:
            return None
        graphic = locate_graphic(result.sections, self.client.fetch_bytes)
        if graphic is not None:
            logger.info("Solution family plot found")
        return graphic
