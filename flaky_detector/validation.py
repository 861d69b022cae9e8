"""Validation of detection options."""

import math
from dataclasses import dataclass
from typing import TypeGuard

from flaky_detector.errors import (
    InvalidCommandError,
    InvalidRunsError,
    InvalidThresholdError,
)

MIN_RUNS = 1
MAX_RUNS = 1000
MIN_THRESHOLD = 0.0
MAX_THRESHOLD = 100.0


@dataclass(frozen=True, kw_only=True)
class DetectionConfig:
    """Validated, normalized detection options."""

    command: str
    runs: int
    threshold: float = 0.0


def _is_finite_number(value: object) -> TypeGuard[int | float]:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return False
    return math.isfinite(value)


def validate_command(command: object) -> str:
    """Return the command if it is a non-empty string.

    Raises:
        InvalidCommandError: If the command is empty or not a string

    """
    if not isinstance(command, str) or not command:
        raise InvalidCommandError("Test command must be a non-empty string")
    return command


def validate_runs(runs: object, *, minimum: int = MIN_RUNS) -> int:
    """Return the run count as an int if it lies within [minimum, MAX_RUNS].

    Raises:
        InvalidRunsError: If runs is not a finite whole number in range

    """
    if not _is_finite_number(runs) or not minimum <= runs <= MAX_RUNS:
        raise InvalidRunsError(f"Runs must be between {minimum} and {MAX_RUNS}")
    if runs != int(runs):
        raise InvalidRunsError("Runs must be a whole number")
    return int(runs)


def validate_threshold(threshold: object) -> float:
    """Return the threshold as a float, defaulting to 0 when absent.

    Raises:
        InvalidThresholdError: If threshold is not a finite number in [0, 100]

    """
    if threshold is None:
        return MIN_THRESHOLD
    if (
        not _is_finite_number(threshold)
        or not MIN_THRESHOLD <= threshold <= MAX_THRESHOLD
    ):
        raise InvalidThresholdError(
            f"Threshold must be between {MIN_THRESHOLD:g} and {MAX_THRESHOLD:g}"
        )
    return float(threshold)


def validate_options(
    command: object,
    runs: object,
    threshold: object = None,
    *,
    min_runs: int = MIN_RUNS,
) -> DetectionConfig:
    """Validate all detection options, raising the first failure found.

    Checks run in order: command, runs, threshold.
    """
    return DetectionConfig(
        command=validate_command(command),
        runs=validate_runs(runs, minimum=min_runs),
        threshold=validate_threshold(threshold),
    )
