"""CLI entry point for the flakiness detector."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from flaky_detector.api import DEFAULT_RUNS, detect
from flaky_detector.formatters import OutputFormat, format_json, format_report
from flaky_detector.models.events import ProgressEvent
from flaky_detector.models.report import DetectionReport
from flaky_detector.progress import NullProgressSink, ProgressSink, RichProgressSink
from flaky_detector.result import Err

EXIT_OK = 0
EXIT_FLAKY = 1
EXIT_ERROR = 2

EPILOG = """\
exit codes:
  0  detection completed, no flakiness found
  1  flakiness detected (tests failed inconsistently)
  2  invalid arguments or execution error

examples:
  flaky --test "pytest tests/" --runs 20
  flaky --test "npm test" --format text --threshold 10
  flaky --test "cargo test" --stream
"""


def print_event(event: ProgressEvent) -> None:
    """Write one progress event as a JSON line on stdout."""
    print(event.model_dump_json(by_alias=True, exclude_none=True), flush=True)


def write_report(path: Path, report: DetectionReport) -> None:
    """Write the JSON report to a file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(format_json(report) + "\n", encoding="utf-8")


async def run(
    test: str,
    runs: int = DEFAULT_RUNS,
    threshold: float = 0.0,
    output_format: OutputFormat = OutputFormat.JSON,
    *,
    verbose: bool = False,
    stream: bool = False,
    output: Path | None = None,
    sink: ProgressSink | None = None,
) -> int:
    """Run flakiness detection and return the exit code."""
    log = logging.getLogger("flaky_detector")

    log.info("Checking %s over %d runs (threshold=%g%%)", test, runs, threshold)
    result = await detect(
        test,
        runs,
        verbose=verbose,
        threshold=threshold,
        on_progress=print_event if stream else None,
        sink=sink or NullProgressSink(),
    )

    if isinstance(result, Err):
        log.error("Detection failed: %s", result.error)
        print(f"Error: {result.error}", file=sys.stderr)
        return EXIT_ERROR

    report = result.value

    if output is not None:
        try:
            write_report(output, report)
        except OSError as e:
            log.error("Failed to write report to %s: %s", output, e)
            print(f"Error: cannot write report: {e}", file=sys.stderr)
            return EXIT_ERROR
        log.info("Report written to %s", output)

    # The complete event already carries the report when streaming.
    if not stream:
        print(format_report(report, output_format))

    return EXIT_FLAKY if report.is_flaky else EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="flaky",
        description=(
            "Detect unreliable tests by running them multiple times "
            "and tracking failure rates."
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-t",
        "--test",
        required=True,
        help="Test command to execute",
    )
    parser.add_argument(
        "-r",
        "--runs",
        type=int,
        default=DEFAULT_RUNS,
        help="Number of times to run the test (default: %(default)s)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=0.0,
        help="Tolerated failure rate percentage, 0-100 (default: %(default)s)",
    )
    parser.add_argument(
        "-f",
        "--format",
        type=OutputFormat,
        choices=list(OutputFormat),
        default=OutputFormat.JSON,
        help="Output format: json, text, minimal (default: %(default)s)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging on stderr",
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Print progress events as JSON lines instead of the final report",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Also write the JSON report to this file",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable the progress bar",
    )
    return parser


def main() -> None:
    """CLI entry point."""
    args = build_parser().parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            test=args.test,
            runs=args.runs,
            threshold=args.threshold,
            output_format=args.format,
            verbose=args.verbose,
            stream=args.stream,
            output=args.output,
            sink=NullProgressSink() if args.no_progress else RichProgressSink(),
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
