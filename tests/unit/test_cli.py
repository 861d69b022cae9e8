"""Tests for CLI module."""

import json
import logging
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from flaky_detector.cli import build_parser, main, print_event, run, write_report
from flaky_detector.errors import InvalidRunsError
from flaky_detector.formatters import OutputFormat
from flaky_detector.models.events import StartEvent
from flaky_detector.models.report import DetectionReport
from flaky_detector.result import Err, Ok
from flaky_detector.testing.factories import DetectionReportFactory, FlakeStatFactory
from flaky_detector.testing.executors import ScriptedExecutor


@pytest.fixture
def stable_report() -> DetectionReport:
    """Report without flakiness."""
    return DetectionReportFactory.build()


@pytest.fixture
def flaky_report() -> DetectionReport:
    """Report with a flaky suite."""
    return DetectionReportFactory.build(
        total_runs=10,
        passed_runs=7,
        failed_runs=3,
        flaky_tests=[FlakeStatFactory.build()],
    )


def test_print_event_writes_json_line(capsys: pytest.CaptureFixture[str]) -> None:
    """Prints one compact JSON object per line."""
    print_event(StartEvent(total_runs=3))

    assert capsys.readouterr().out == '{"type":"start","totalRuns":3}\n'


def test_write_report_creates_parents(
    tmp_path: Path, flaky_report: DetectionReport
) -> None:
    """Writes the JSON report, creating missing directories."""
    path = tmp_path / "artifacts" / "flakiness.json"

    write_report(path, flaky_report)

    assert json.loads(path.read_text())["failedRuns"] == 3


class TestRun:
    """Tests for run function."""

    async def test_returns_zero_without_flakiness(
        self,
        stable_report: DetectionReport,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Returns 0 and prints the JSON report."""
        with patch(
            "flaky_detector.cli.detect",
            new_callable=AsyncMock,
            return_value=Ok(stable_report),
        ):
            exit_code = await run("make test", 3)

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)["passedRuns"] == 3

    async def test_returns_one_when_flaky(
        self,
        flaky_report: DetectionReport,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        """Returns 1 when flakiness is detected."""
        with patch(
            "flaky_detector.cli.detect",
            new_callable=AsyncMock,
            return_value=Ok(flaky_report),
        ):
            exit_code = await run("make test", 10, output_format=OutputFormat.MINIMAL)

        assert exit_code == 1
        assert capsys.readouterr().out == "Test Suite\n"

    async def test_returns_two_on_configuration_error(
        self, capsys: pytest.CaptureFixture[str], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Returns 2 and reports the error on stderr."""
        with (
            caplog.at_level(logging.ERROR),
            patch(
                "flaky_detector.cli.detect",
                new_callable=AsyncMock,
                return_value=Err(InvalidRunsError("Runs must be between 1 and 1000")),
            ),
        ):
            exit_code = await run("make test", 0)

        assert exit_code == 2
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Error: Runs must be between 1 and 1000" in captured.err
        assert "Detection failed" in caplog.text

    async def test_passes_options_to_detect(
        self, stable_report: DetectionReport
    ) -> None:
        """Forwards runs, threshold and verbosity."""
        with patch(
            "flaky_detector.cli.detect",
            new_callable=AsyncMock,
            return_value=Ok(stable_report),
        ) as mock_detect:
            await run("make test", 20, 12.5, verbose=True)

        args, kwargs = mock_detect.call_args
        assert args == ("make test", 20)
        assert kwargs["threshold"] == 12.5
        assert kwargs["verbose"] is True
        assert kwargs["on_progress"] is None

    async def test_streams_events_without_final_report(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Prints 2N+2 event lines and no formatted report."""
        executor = ScriptedExecutor(exit_codes=(0, 1))

        with patch("flaky_detector.api.ShellExecutor", return_value=executor):
            exit_code = await run("make test", 3, stream=True)

        lines = capsys.readouterr().out.splitlines()
        events = [json.loads(line) for line in lines]
        assert exit_code == 1
        assert len(events) == 1 + 3 + 3 + 1
        assert events[0] == {"type": "start", "totalRuns": 3}
        assert events[-1]["type"] == "complete"
        assert events[-1]["report"]["failedRuns"] == 1

    async def test_writes_output_file(
        self, tmp_path: Path, flaky_report: DetectionReport
    ) -> None:
        """Writes the JSON report to the output path."""
        path = tmp_path / "report.json"

        with patch(
            "flaky_detector.cli.detect",
            new_callable=AsyncMock,
            return_value=Ok(flaky_report),
        ):
            exit_code = await run(
                "make test", 10, output_format=OutputFormat.TEXT, output=path
            )

        assert exit_code == 1
        assert json.loads(path.read_text())["flakyTests"][0]["testName"] == (
            "Test Suite"
        )

    async def test_returns_two_when_output_not_writable(
        self, tmp_path: Path, stable_report: DetectionReport
    ) -> None:
        """Returns 2 when the report file cannot be written."""
        blocker = tmp_path / "file"
        blocker.write_text("")

        with patch(
            "flaky_detector.cli.detect",
            new_callable=AsyncMock,
            return_value=Ok(stable_report),
        ):
            exit_code = await run("make test", 3, output=blocker / "report.json")

        assert exit_code == 2


class TestBuildParser:
    """Tests for argument parsing."""

    def test_defaults(self) -> None:
        """Uses documented defaults."""
        args = build_parser().parse_args(["--test", "make test"])

        assert args.test == "make test"
        assert args.runs == 10
        assert args.threshold == 0.0
        assert args.format is OutputFormat.JSON
        assert args.verbose is False
        assert args.stream is False
        assert args.output is None
        assert args.no_progress is False

    def test_short_flags(self) -> None:
        """Accepts short flags."""
        args = build_parser().parse_args(
            ["-t", "npm test", "-r", "20", "-f", "text", "-v", "-o", "out.json"]
        )

        assert args.test == "npm test"
        assert args.runs == 20
        assert args.format is OutputFormat.TEXT
        assert args.verbose is True
        assert args.output == Path("out.json")

    def test_missing_test_exits_with_two(self) -> None:
        """Exits with code 2 when the test command is missing."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args([])

        assert exc_info.value.code == 2

    def test_unknown_format_exits_with_two(self) -> None:
        """Exits with code 2 for unknown formats."""
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--test", "make test", "--format", "xml"])

        assert exc_info.value.code == 2


class TestMain:
    """Tests for main CLI entry point."""

    def test_exits_with_run_result(self) -> None:
        """Main function exits with the result from run()."""
        with (
            patch("sys.argv", ["flaky", "--test", "make test", "--runs", "5"]),
            patch("flaky_detector.cli.asyncio.run", return_value=0) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 0
        mock_run.assert_called_once()
        mock_run.call_args.args[0].close()

    def test_exits_with_flaky_code(self) -> None:
        """Main function exits with code 1 when flakiness is found."""
        with (
            patch("sys.argv", ["flaky", "--test", "make test", "--no-progress"]),
            patch("flaky_detector.cli.asyncio.run", return_value=1) as mock_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            main()

        assert exc_info.value.code == 1
        mock_run.call_args.args[0].close()
