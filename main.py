import logging
from collections.abc import Mapping

from flask import Flask, jsonify, request

from backend.config import Settings
from backend.errors import InvalidEquationError, MissingCredentialsError, NoSolutionError
from backend.sampler import plot_answer
from backend.strategy import QueryStrategy
from backend.wolfram_client import WolframAlphaClient

logger = logging.getLogger(__name__)

NO_PLOT_NOTICE = "Could not generate a plot for this solution."

server = Flask(__name__)
settings = Settings.from_env()


def make_strategy() -> QueryStrategy:
    client = WolframAlphaClient(
        app_id=settings.require_app_id(),
        timeout_s=settings.timeout_s,
        base_url=settings.wolfram_base_url,
    )
    return QueryStrategy(client, templates=settings.phrase_templates)


def error_response(message, status):
    return jsonify({"error": message, "message": message}), status


@server.route("/api/hello")
def hello():
    return jsonify({"message": "API Working!"})


@server.route("/api/solve", methods=["POST"])
def solve():
    body = request.get_json(silent=True) if request.is_json else request.form
    if not isinstance(body, Mapping):
        return error_response("The request body must be a JSON object or form.", 400)

    equation = str(body.get("equation") or "").strip()
    initial_condition = str(body.get("initialCondition") or "").strip() or None
    if not equation:
        return error_response("An equation is required.", 400)

    logger.info("Solving %r (initial condition: %r)", equation, initial_condition)

    try:
        strategy = make_strategy()
        resolution = strategy.resolve(equation, initial_condition)
    except InvalidEquationError as e:
        return error_response(e.message, 400)
    except MissingCredentialsError as e:
        logger.error("Wolfram|Alpha is not configured: %s", e.message)
        return error_response(e.message, 500)
    except NoSolutionError as e:
        return error_response(e.message, 422)

    plot = plot_answer(resolution.answer, domain=settings.plot_domain, step=settings.plot_step)

    payload = {
        "solutionText": resolution.answer,
        "graphic": resolution.graphic.to_dict() if resolution.graphic else None,
        "classification": resolution.classification,
        "plot": plot.to_dict() if plot else None,
        "plotAvailable": plot is not None,
        "query": resolution.query,
    }
    if plot is None:
        payload["notice"] = NO_PLOT_NOTICE
    return jsonify(payload)


if __name__ == '__main__':
    import set_env_vars

    set_env_vars.initialize_env_vars()
    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s [%(levelname)s] %(message)s")
    server.run(port=8080)
