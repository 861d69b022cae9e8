"""Classification of run tallies into flakiness statistics."""

from collections.abc import Sequence

from flaky_detector.models.report import SUITE_NAME, FlakeStat


def failure_rate(failed: int, total: int) -> float:
    """Return the failure percentage, unrounded."""
    if total <= 0:
        return 0.0
    # Multiply first so that 3 of 20 gives exactly 15.0.
    return (failed * 100) / total


def classify(
    passed: int,
    failed: int,
    total: int,
    threshold: float = 0.0,
) -> Sequence[FlakeStat]:
    """Decide whether a set of runs is flaky.

    A run set is flaky only when it has both passes and failures and its
    failure rate is strictly greater than ``threshold``. A command that fails
    every time is broken, not flaky, whatever the threshold.

    Args:
        passed: Number of passing runs
        failed: Number of failing runs
        total: Total number of runs
        threshold: Tolerated failure percentage (0-100)

    Returns:
        A single FlakeStat for the whole suite when flaky, otherwise empty

    """
    if passed <= 0 or failed <= 0:
        return []

    # A rate equal to the threshold is tolerated.
    if failed * 100 <= threshold * total:
        return []

    return [
        FlakeStat(
            test_name=SUITE_NAME,
            passed=passed,
            failed=failed,
            total_runs=total,
            failure_rate=failure_rate(failed, total),
        )
    ]
