"""Progress events emitted while a detection pass runs."""

from collections.abc import Callable
from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from flaky_detector.models.base import Model
from flaky_detector.models.report import DetectionReport


class StartEvent(Model):
    """Emitted once before the first run."""

    type: Literal["start"] = "start"
    total_runs: int


class RunStartEvent(Model):
    """Emitted before each run."""

    type: Literal["run-start"] = "run-start"
    run_number: int
    total_runs: int


class RunCompleteEvent(Model):
    """Emitted after each run with its outcome."""

    type: Literal["run-complete"] = "run-complete"
    run_number: int
    total_runs: int
    success: bool
    exit_code: int


class CompleteEvent(Model):
    """Emitted once with the final report."""

    type: Literal["complete"] = "complete"
    report: DetectionReport


ProgressEvent = Annotated[
    StartEvent | RunStartEvent | RunCompleteEvent | CompleteEvent,
    Field(discriminator="type"),
]

ProgressCallback = Callable[[ProgressEvent], object]

progress_event_adapter: TypeAdapter[ProgressEvent] = TypeAdapter(ProgressEvent)
