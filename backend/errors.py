from __future__ import annotations


class SolverError(Exception):
    """Base error; ``message`` is safe to show to the user."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidEquationError(SolverError, ValueError):
    pass


class MissingCredentialsError(SolverError, RuntimeError):
    pass


class NoSolutionError(SolverError):
    pass


class ExpressionError(SolverError, ValueError):
    pass


class WolframAlphaError(SolverError, RuntimeError):
    pass
