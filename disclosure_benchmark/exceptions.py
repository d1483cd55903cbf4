"""
Error taxonomy for the attribute disclosure benchmark.

Two families are distinguished:
  - ConfigurationError: defects in the static benchmark tables. These abort
    the whole sweep.
  - RunAbortedError: failures tied to one (dataset, model, attribute,
    threshold) tuple. The sweep logs them and moves on to the next tuple.
"""

from typing import Optional


class BenchmarkError(Exception):
    """Base class for all benchmark errors."""


class ConfigurationError(BenchmarkError):
    """Malformed or incomplete static parameter tables."""


class UnknownModelError(ConfigurationError):
    """Privacy model outside the closed enumeration."""


class InvalidAttributeError(ConfigurationError):
    """No threshold or sensitive-attribute entry for a (dataset, attribute) pair."""


class RunAbortedError(BenchmarkError):
    """
    Failure that aborts a single parameter tuple.

    Attributes:
        run_label: Label of the aborted run (dataset/attribute/model/threshold)
        transformation: Level vector of the node being processed, if any
    """

    def __init__(
        self,
        message: str,
        run_label: Optional[str] = None,
        transformation: Optional[str] = None
    ):
        super().__init__(message)
        self.run_label = run_label
        self.transformation = transformation

    def __str__(self) -> str:
        message = super().__str__()
        context = [c for c in (self.run_label, self.transformation) if c]
        if context:
            return f"{message} [{' @ '.join(context)}]"
        return message


class DatasetLoadError(RunAbortedError):
    """Dataset file missing or unparseable."""


class HierarchyLoadError(RunAbortedError):
    """Generalization hierarchy file missing or unparseable."""


class EngineError(RunAbortedError):
    """Failure inside the anonymization engine (search, materialization, refinement)."""


class MeasurementError(RunAbortedError):
    """Quality metric or classifier failure on a materialized output."""
