"""Output formatters for detection reports.

* ``json``: the complete report as pretty-printed JSON.
* ``text``: a human-readable summary.
* ``minimal``: flaky test names only, one per line, for piping.
"""

from enum import StrEnum

from flaky_detector.models.report import DetectionReport

RULE_WIDTH = 50


class OutputFormat(StrEnum):
    """Supported output formats."""

    JSON = "json"
    TEXT = "text"
    MINIMAL = "minimal"


def format_json(report: DetectionReport) -> str:
    """Serialize the report with camelCase keys, omitting an absent error."""
    return report.model_dump_json(by_alias=True, exclude_none=True, indent=2)


def format_text(report: DetectionReport) -> str:
    """Render the report as multi-line text.

    Error reports only show the error message, without a summary.
    """
    lines = [
        "🔍 Test Flakiness Detection Report",
        "═" * RULE_WIDTH,
        "",
    ]

    if not report.success:
        lines.append("❌ Error")
        lines.append(f"  {report.error or 'Detection failed'}")
        return "\n".join(lines)

    lines.extend(
        [
            "📊 Summary",
            f"  Total Runs: {report.total_runs}",
            f"  Passed: {report.passed_runs}",
            f"  Failed: {report.failed_runs}",
            "",
        ]
    )

    if not report.flaky_tests:
        if report.passed_runs == report.total_runs:
            lines.append("✅ No flakiness detected (all tests passed)")
        elif report.failed_runs == report.total_runs:
            lines.append("✅ No flakiness detected (all tests failed consistently)")
        else:
            lines.append("✅ No flakiness detected")
        return "\n".join(lines)

    lines.extend(["⚠️  Flaky Tests Detected", "", "Flaky Tests:"])
    for stat in report.flaky_tests:
        lines.extend(
            [
                f"  • {stat.test_name}",
                f"    Passed: {stat.passed}/{stat.total_runs} "
                f"({100 - stat.failure_rate:.1f}%)",
                f"    Failed: {stat.failed}/{stat.total_runs} "
                f"({stat.failure_rate:.1f}%)",
                "",
            ]
        )
    return "\n".join(lines)


def format_minimal(report: DetectionReport) -> str:
    """Return flaky test names joined by newlines.

    Errors produce an empty string: there are no names to print.
    """
    if not report.success:
        return ""
    return "\n".join(stat.test_name for stat in report.flaky_tests)


def format_report(report: DetectionReport, output_format: OutputFormat | str) -> str:
    """Format the report in the requested format.

    Raises:
        ValueError: If the format is not one of OutputFormat

    """
    match output_format:
        case OutputFormat.JSON:
            return format_json(report)
        case OutputFormat.TEXT:
            return format_text(report)
        case OutputFormat.MINIMAL:
            return format_minimal(report)
        case _:
            raise ValueError(f"Unknown format: {output_format}")
