from __future__ import annotations

import dataclasses
import logging
import math
import os

from backend.errors import MissingCredentialsError

logger = logging.getLogger(__name__)

DEFAULT_PLOT_DOMAIN = (-10.0, 10.0)
DEFAULT_PLOT_STEP = 0.1

WOLFRAM_BASE_URL = "https://api.wolframalpha.com/v2/query"

PHRASE_TEMPLATES = (
    "solve {equation}",
    "solve differential equation {equation}",
    "solve {equation} for y",
)
CONDITION_TEMPLATE = "{phrase} with {condition}"
PLOT_FALLBACK_TEMPLATE = "plot family of solutions for {equation}"

APP_ID_KEYS = ("WOLFRAM_APP_ID", "WOLFRAM_APPID", "WOLFRAM_ALPHA_API_KEY")
MISSING_KEY_MESSAGE = (
    "The Wolfram|Alpha API key is not configured. "
    "Set WOLFRAM_APP_ID (or WOLFRAM_ALPHA_API_KEY) in the environment."
)


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


def _plot_domain() -> tuple[float, float]:
    lo = _env_float("PLOT_X_MIN", DEFAULT_PLOT_DOMAIN[0])
    hi = _env_float("PLOT_X_MAX", DEFAULT_PLOT_DOMAIN[1])
    if lo >= hi:
        logger.warning("Ignoring plot domain [%s, %s]; using %s", lo, hi, DEFAULT_PLOT_DOMAIN)
        return DEFAULT_PLOT_DOMAIN
    return lo, hi


def _plot_step() -> float:
    step = _env_float("PLOT_STEP", DEFAULT_PLOT_STEP)
    if step <= 0:
        logger.warning("Ignoring non-positive PLOT_STEP %s; using %s", step, DEFAULT_PLOT_STEP)
        return DEFAULT_PLOT_STEP
    return step


def wolfram_app_id() -> str | None:
    for key in APP_ID_KEYS:
        v = os.environ.get(key)
        if v:
            return v
    return None


@dataclasses.dataclass(frozen=True)
class Settings:
    wolfram_app_id: str | None
    wolfram_base_url: str = WOLFRAM_BASE_URL
    timeout_s: float = 30.0
    plot_domain: tuple[float, float] = DEFAULT_PLOT_DOMAIN
    plot_step: float = DEFAULT_PLOT_STEP
    log_level: str = "INFO"
    phrase_templates: tuple[str, ...] = PHRASE_TEMPLATES

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            wolfram_app_id=wolfram_app_id(),
            wolfram_base_url=os.environ.get("WOLFRAM_BASE_URL") or WOLFRAM_BASE_URL,
            timeout_s=_env_float("WOLFRAM_TIMEOUT_S", 30.0),
            plot_domain=_plot_domain(),
            plot_step=_plot_step(),
            log_level=(os.environ.get("LOG_LEVEL") or "INFO").upper(),
        )

    def require_app_id(self) -> str:
        if not self.wolfram_app_id:
            raise MissingCredentialsError(MISSING_KEY_MESSAGE)
        return self.wolfram_app_id
