"""Exceptions raised by the feasibility tests."""


class AnalysisError(Exception):
    """Base class for all errors raised by rtfeas."""


class InvalidInputError(AnalysisError, ValueError):
    """A task, task set or configuration value the analysis cannot evaluate.

    Raised for non-positive task parameters, for the Liu-Layland bound of an
    empty task set, and for malformed configuration or task-set files.
    """


class PreconditionViolation(AnalysisError, ValueError):
    """The task order does not match the priority order the policy implies."""
