"""
Exception hierarchy for the data quality engine.

Registration and source errors propagate to the caller. Rule evaluation
errors are caught by the Evaluator and recorded on the rule's result.
"""


class DataQualityError(Exception):
    """Base class for all engine errors."""


class SourceUnavailable(DataQualityError):
    """The underlying dataset could not be opened or read."""

    def __init__(self, table: str, reason: str = ''):
        self.table = table
        self.reason = reason
        message = f"source for table {table!r} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class DuplicateRuleName(DataQualityError):
    """A rule with the same name is already registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"rule {name!r} is already registered")


class RegistryLocked(DataQualityError):
    """The registry was mutated after an evaluation run started."""


class RuleDefinitionError(DataQualityError):
    """A declarative rule definition is malformed."""


class RuleEvaluationError(DataQualityError):
    """A single rule failed while evaluating its pass."""


class RuleTimeout(RuleEvaluationError):
    """A rule's pass exceeded the configured timeout."""
