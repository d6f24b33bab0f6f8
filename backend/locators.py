"""Ranked lookups over the titled sections of a solver response.

Section titles are controlled by the service and change between versions, so
every lookup is an ordered allow-list with a fallback rather than a fixed
mapping from title to meaning.
"""
from __future__ import annotations

import base64
import dataclasses
import logging
import re
import typing as t

from backend.sections import ImageRef, Section

logger = logging.getLogger(__name__)

ANSWER_TITLES = (
    "Solution",
    "Differential equation solution",
    "General solution",
    "Exact solution",
    "Particular solution",
    "Solution to the differential equation",
    "Indefinite integral",
    "Integral",
    "Result",
)

# Most specific first: a particular solution, then a family, then the slope field.
GRAPHIC_TIERS: tuple[tuple[str, ...], ...] = (
    (
        "Plots of the solution",
        "Plot of the solution",
        "Plots of sample individual solution",
        "Plot",
        "Solution plot",
    ),
    (
        "Sample solution family",
        "Solution curves",
    ),
    ("Slope field",),
)

CLASSIFICATION_TITLES = ("ODE classification", "Clasificación de la EDO")

EQUATION_MARKERS = (
    re.compile(r"\b[a-zA-Z]\w*\s*="),
    re.compile(r"\b[a-zA-Z]\w*\([^()=]*\)\s*="),
    re.compile(r"="),
)


@dataclasses.dataclass(frozen=True)
class Graphic:
    data: bytes
    alt_text: str
    mime_type: str = "image/png"

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64," + base64.b64encode(self.data).decode("ascii")

    def to_dict(self) -> dict[str, str]:
        return {"dataUri": self.data_uri, "altText": self.alt_text}


def locate_answer(sections: list[Section]) -> str | None:
    for title in ANSWER_TITLES:
        for section in sections:
            if section.title == title and section.text:
                logger.info("Answer found in %r", section.title)
                return section.text

    # Permissive on purpose: a bare "=" can also match an echo of the input.
    for section in sections:
        text = section.text
        if not text:
            continue
        if any(p.search(text) for p in EQUATION_MARKERS):
            logger.info("Answer taken from equation-like text in %r", section.title)
            return text
    return None


def locate_classification(sections: list[Section]) -> str | None:
    for section in sections:
        if section.title in CLASSIFICATION_TITLES and section.text:
            return section.text
    return None


def _select_graphic_section(sections: list[Section]) -> Section | None:
    for tier in GRAPHIC_TIERS:
        for section in sections:
            if section.title in tier and section.image is not None:
                return section
    return None


def locate_graphic(
    sections: list[Section],
    fetch_bytes: t.Callable[[str], bytes],
) -> Graphic | None:
    """Pick the most specific plot image and inline it.

    Only the best-ranked section is fetched. If that fetch fails the result
    is ``None``; lower-ranked images are not tried.
    """
    section = _select_graphic_section(sections)
    if section is None:
        logger.info("No suitable plot found in any of the pods")
        return None
    image = t.cast(ImageRef, section.image)
    logger.info("Selected plot pod %r", section.title)
    try:
        data = fetch_bytes(image.src)
    except Exception as e:
        logger.warning("Failed to fetch plot image for %r: %s", section.title, e)
        return None
    if not data:
        logger.warning("Plot image for %r was empty", section.title)
        return None
    return Graphic(data=data, alt_text=image.alt or section.title)
