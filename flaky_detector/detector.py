"""Detection loop running the test command repeatedly."""

import logging
from dataclasses import dataclass, field

from flaky_detector.classifier import classify
from flaky_detector.errors import ConfigurationError
from flaky_detector.executor import CommandExecutor, ShellExecutor
from flaky_detector.models.events import (
    CompleteEvent,
    ProgressCallback,
    ProgressEvent,
    RunCompleteEvent,
    RunStartEvent,
    StartEvent,
)
from flaky_detector.models.report import DetectionReport, RunResult
from flaky_detector.progress import (
    NullProgressSink,
    ProgressSink,
    ProgressTracker,
    new_progress_id,
)
from flaky_detector.validation import DetectionConfig, validate_options

log = logging.getLogger(__name__)


def emit(on_progress: ProgressCallback | None, event: ProgressEvent) -> None:
    """Deliver an event to the callback, discarding any error it raises."""
    if on_progress is None:
        return
    try:
        on_progress(event)
    except Exception:
        log.debug("Progress callback failed on %s event", event.type, exc_info=True)


@dataclass(frozen=True, kw_only=True)
class FlakinessDetector:
    """Runs a command a number of times and classifies the outcome.

    Runs are strictly sequential: concurrent runs could contend for shared
    resources and produce failures that are not the command's own.
    """

    executor: CommandExecutor = field(default_factory=ShellExecutor)
    sink: ProgressSink = field(default_factory=NullProgressSink)

    async def run(
        self,
        command: str,
        runs: int,
        threshold: float = 0.0,
        *,
        verbose: bool = False,
        on_progress: ProgressCallback | None = None,
        progress_id: str | None = None,
    ) -> DetectionReport:
        """Execute one detection pass over already validated options.

        Args:
            command: Shell command to run
            runs: Number of runs
            threshold: Tolerated failure percentage
            verbose: Log each run at INFO instead of DEBUG
            on_progress: Optional callback receiving progress events
            progress_id: Sink identifier, generated when omitted

        Returns:
            The detection report

        """
        level = logging.INFO if verbose else logging.DEBUG
        tracker = ProgressTracker(
            sink=self.sink,
            progress_id=progress_id or new_progress_id(),
            total=runs,
        )

        if tracker.init("Detecting flakiness..."):
            log.log(level, "Progress tracking enabled")
        log.log(level, "Running test command %d times: %s", runs, command)
        emit(on_progress, StartEvent(total_runs=runs))

        results: list[RunResult] = []
        passed = 0
        failed = 0

        try:
            for run_number in range(1, runs + 1):
                log.log(level, "Run %d/%d", run_number, runs)
                emit(
                    on_progress,
                    RunStartEvent(run_number=run_number, total_runs=runs),
                )

                log.log(level, "Executing: %s", command)
                result = await self.executor.execute(command)
                results.append(result)
                if result.success:
                    passed += 1
                else:
                    failed += 1

                status = "passed" if result.success else "failed"
                tracker.increment(
                    f"Run {run_number}/{runs} {status} "
                    f"({passed} passed, {failed} failed)"
                )
                emit(
                    on_progress,
                    RunCompleteEvent(
                        run_number=run_number,
                        total_runs=runs,
                        success=result.success,
                        exit_code=result.exit_code,
                    ),
                )

            flaky_tests = classify(passed, failed, runs, threshold)

            if flaky_tests:
                tracker.finish(
                    f"Flakiness detected: {flaky_tests[0].failure_rate:.1f}% "
                    "failure rate"
                )
            else:
                tracker.finish("No flakiness detected")
        finally:
            tracker.clear()

        log.log(
            level, "Completed %d runs: %d passed, %d failed", runs, passed, failed
        )
        if flaky_tests and verbose:
            log.warning("Detected flaky tests in: %s", command)

        report = DetectionReport(
            success=True,
            total_runs=runs,
            passed_runs=passed,
            failed_runs=failed,
            flaky_tests=flaky_tests,
            runs=results,
        )
        emit(on_progress, CompleteEvent(report=report))
        return report


async def detect_flakiness(
    command: object,
    runs: object = 10,
    threshold: object = None,
    *,
    verbose: bool = False,
    on_progress: ProgressCallback | None = None,
    detector: FlakinessDetector | None = None,
) -> DetectionReport:
    """Validate options and run one detection pass.

    Invalid options produce a report with ``success=False`` rather than an
    exception.
    """
    try:
        config: DetectionConfig = validate_options(command, runs, threshold)
    except ConfigurationError as e:
        return DetectionReport.failure(str(e))

    return await (detector or FlakinessDetector()).run(
        config.command,
        config.runs,
        config.threshold,
        verbose=verbose,
        on_progress=on_progress,
    )
