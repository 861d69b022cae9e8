"""Detect flaky tests by running them repeatedly."""

from flaky_detector.api import (
    CompiledDetector,
    CompileOptions,
    compile_detector,
    detect,
    is_flaky,
)
from flaky_detector.detector import FlakinessDetector, detect_flakiness
from flaky_detector.errors import (
    ConfigurationError,
    InvalidCommandError,
    InvalidRunsError,
    InvalidThresholdError,
)
from flaky_detector.executor import CommandExecutor, ShellExecutor
from flaky_detector.formatters import (
    OutputFormat,
    format_json,
    format_minimal,
    format_report,
    format_text,
)
from flaky_detector.models.events import (
    CompleteEvent,
    ProgressCallback,
    ProgressEvent,
    RunCompleteEvent,
    RunStartEvent,
    StartEvent,
)
from flaky_detector.models.report import DetectionReport, FlakeStat, RunResult
from flaky_detector.progress import NullProgressSink, ProgressSink, RichProgressSink
from flaky_detector.result import Err, Ok, Result

__all__ = [
    "CommandExecutor",
    "CompileOptions",
    "CompiledDetector",
    "CompleteEvent",
    "ConfigurationError",
    "DetectionReport",
    "Err",
    "FlakeStat",
    "FlakinessDetector",
    "InvalidCommandError",
    "InvalidRunsError",
    "InvalidThresholdError",
    "NullProgressSink",
    "Ok",
    "OutputFormat",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressSink",
    "Result",
    "RichProgressSink",
    "RunCompleteEvent",
    "RunResult",
    "RunStartEvent",
    "ShellExecutor",
    "StartEvent",
    "compile_detector",
    "detect",
    "detect_flakiness",
    "format_json",
    "format_minimal",
    "format_report",
    "format_text",
    "is_flaky",
]
