"""Models for run results and detection reports."""

from collections.abc import Sequence

from pydantic import Field

from flaky_detector.models.base import Model

SUITE_NAME = "Test Suite"


class RunResult(Model):
    """Outcome of a single execution of the test command."""

    success: bool = Field(..., description="True iff the exit status was 0")
    exit_code: int = Field(..., description="Exit status of the command")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")


class FlakeStat(Model):
    """Flakiness statistics for one classification unit."""

    test_name: str = Field(default=SUITE_NAME, description="Test identifier")
    passed: int = Field(..., description="Number of passing runs")
    failed: int = Field(..., description="Number of failing runs")
    total_runs: int = Field(..., description="Number of runs performed")
    failure_rate: float = Field(..., description="Failure percentage (0-100)")


class DetectionReport(Model):
    """Aggregate result of a complete detection pass."""

    success: bool = Field(..., description="Whether detection itself completed")
    total_runs: int = 0
    passed_runs: int = 0
    failed_runs: int = 0
    flaky_tests: Sequence[FlakeStat] = Field(default_factory=list)
    runs: Sequence[RunResult] = Field(default_factory=list)
    error: str | None = Field(default=None, description="Set iff success is false")

    @classmethod
    def failure(cls, message: str) -> "DetectionReport":
        """Build the error variant of a report."""
        return cls(success=False, error=message)

    @property
    def is_flaky(self) -> bool:
        """Whether any flaky entry was recorded."""
        return len(self.flaky_tests) > 0
