"""Public API for flakiness detection.

Three entry points share one detection loop:

* ``detect`` returns the full report.
* ``is_flaky`` returns only whether flakiness was found, for CI gates.
* ``compile_detector`` validates a command once and returns a reusable
  detector whose ``run`` accepts a fresh run count on every call.

``detect``, ``is_flaky`` and ``CompiledDetector.run`` never raise: invalid
options and unexpected failures are returned as ``Err``. Only
``compile_detector`` raises, since it is a one-time setup step.
"""

import logging
from dataclasses import dataclass, field

from flaky_detector.detector import FlakinessDetector
from flaky_detector.executor import CommandExecutor, ShellExecutor
from flaky_detector.models.events import ProgressCallback
from flaky_detector.models.report import DetectionReport
from flaky_detector.progress import NullProgressSink, ProgressSink
from flaky_detector.result import Err, Ok, Result
from flaky_detector.validation import (
    validate_command,
    validate_options,
    validate_runs,
    validate_threshold,
)

log = logging.getLogger(__name__)

DEFAULT_RUNS = 10
DEFAULT_QUICK_RUNS = 5
# A single run can never show inconsistent results.
QUICK_MIN_RUNS = 2


def _build_detector(
    executor: CommandExecutor | None, sink: ProgressSink | None
) -> FlakinessDetector:
    return FlakinessDetector(
        executor=executor or ShellExecutor(),
        sink=sink or NullProgressSink(),
    )


async def detect(
    test: str,
    runs: int = DEFAULT_RUNS,
    *,
    verbose: bool = False,
    threshold: float | None = None,
    on_progress: ProgressCallback | None = None,
    executor: CommandExecutor | None = None,
    sink: ProgressSink | None = None,
) -> Result[DetectionReport]:
    """Run the test command ``runs`` times and return the full report.

    Args:
        test: Shell command to run
        runs: Number of runs (1-1000, default 10)
        verbose: Log each run at INFO level
        threshold: Tolerated failure percentage (0-100, default 0)
        on_progress: Optional callback receiving progress events
        executor: Command executor, the system shell by default
        sink: Progress sink, none by default

    Returns:
        Ok with the report, or Err with the validation or runtime error

    """
    try:
        config = validate_options(test, runs, threshold)
        report = await _build_detector(executor, sink).run(
            config.command,
            config.runs,
            config.threshold,
            verbose=verbose,
            on_progress=on_progress,
        )
    except Exception as e:
        return Err(e)
    return Ok(report)


async def is_flaky(
    test: str,
    runs: int = DEFAULT_QUICK_RUNS,
    *,
    threshold: float | None = None,
    on_progress: ProgressCallback | None = None,
    executor: CommandExecutor | None = None,
    sink: ProgressSink | None = None,
) -> Result[bool]:
    """Return whether the test command is flaky, without the detailed report.

    Requires at least two runs and defaults to five, trading precision for
    speed.
    """
    try:
        config = validate_options(test, runs, threshold, min_runs=QUICK_MIN_RUNS)
        report = await _build_detector(executor, sink).run(
            config.command,
            config.runs,
            config.threshold,
            on_progress=on_progress,
        )
    except Exception as e:
        return Err(e)
    return Ok(report.is_flaky)


@dataclass(frozen=True, kw_only=True)
class CompileOptions:
    """Fixed options of a compiled detector."""

    test: str
    verbose: bool = False
    threshold: float | None = None
    on_progress: ProgressCallback | None = None


@dataclass(frozen=True, kw_only=True)
class CompiledDetector:
    """Detector bound to a validated command, reusable across run counts."""

    options: CompileOptions
    threshold: float
    detector: FlakinessDetector = field(default_factory=FlakinessDetector)

    @property
    def command(self) -> str:
        """The test command being checked."""
        return self.options.test

    async def run(self, runs: int) -> Result[DetectionReport]:
        """Run a detection pass with the given run count.

        Only ``runs`` is validated here; the command was validated when the
        detector was compiled.
        """
        try:
            count = validate_runs(runs)
            report = await self.detector.run(
                self.options.test,
                count,
                self.threshold,
                verbose=self.options.verbose,
                on_progress=self.options.on_progress,
            )
        except Exception as e:
            return Err(e)
        return Ok(report)


def compile_detector(
    test: str,
    *,
    verbose: bool = False,
    threshold: float | None = None,
    on_progress: ProgressCallback | None = None,
    executor: CommandExecutor | None = None,
    sink: ProgressSink | None = None,
) -> CompiledDetector:
    """Validate the command once and return a reusable detector.

    Raises:
        InvalidCommandError: If the command is empty or not a string
        InvalidThresholdError: If the threshold is out of range

    """
    validate_command(test)
    normalized_threshold = validate_threshold(threshold)
    log.debug("Compiled detector for: %s", test)

    return CompiledDetector(
        options=CompileOptions(
            test=test,
            verbose=verbose,
            threshold=threshold,
            on_progress=on_progress,
        ),
        threshold=normalized_threshold,
        detector=_build_detector(executor, sink),
    )
