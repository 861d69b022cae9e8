"""Progress reporting sinks for long detection passes."""

import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

log = logging.getLogger(__name__)

# Progress bars are not worth it for short passes.
PROGRESS_MIN_RUNS = 5


def new_progress_id() -> str:
    """Return an identifier unique to one detection pass."""
    return f"flakiness-{uuid.uuid4().hex}"


class ProgressSink(ABC):
    """Receives progress updates for detection passes.

    Every call is addressed by a progress identifier so that one sink can
    serve several detection passes at once.
    """

    @abstractmethod
    def init(self, progress_id: str, total: int, message: str) -> None:
        """Start tracking a pass of ``total`` steps."""

    @abstractmethod
    def increment(self, progress_id: str, amount: int, message: str) -> None:
        """Advance a tracked pass."""

    @abstractmethod
    def finish(self, progress_id: str, message: str) -> None:
        """Mark a tracked pass as done."""

    @abstractmethod
    def clear(self, progress_id: str) -> None:
        """Forget everything about a tracked pass."""


class NullProgressSink(ProgressSink):
    """Sink that ignores all updates."""

    def init(self, progress_id: str, total: int, message: str) -> None:
        """Ignore."""

    def increment(self, progress_id: str, amount: int, message: str) -> None:
        """Ignore."""

    def finish(self, progress_id: str, message: str) -> None:
        """Ignore."""

    def clear(self, progress_id: str) -> None:
        """Ignore."""


@dataclass(frozen=True, kw_only=True)
class RichProgressSink(ProgressSink):
    """Sink rendering one rich progress bar per pass on stderr."""

    console: Console = field(default_factory=lambda: Console(stderr=True))
    _bars: dict[str, tuple[Progress, TaskID]] = field(
        default_factory=dict, repr=False
    )

    def init(self, progress_id: str, total: int, message: str) -> None:
        """Create and start a progress bar."""
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
        )
        task_id = progress.add_task(message, total=total)
        progress.start()
        self._bars[progress_id] = (progress, task_id)

    def increment(self, progress_id: str, amount: int, message: str) -> None:
        """Advance the bar and update its description."""
        progress, task_id = self._bars[progress_id]
        progress.update(task_id, advance=amount, description=message)

    def finish(self, progress_id: str, message: str) -> None:
        """Show the final message and stop rendering."""
        progress, task_id = self._bars[progress_id]
        progress.update(task_id, description=message)
        progress.stop()

    def clear(self, progress_id: str) -> None:
        """Stop the bar if still running and drop it."""
        if (entry := self._bars.pop(progress_id, None)) is not None:
            entry[0].stop()


@dataclass(frozen=True, kw_only=True)
class ProgressTracker:
    """Forwards one pass's progress to a sink, never letting it fail the pass.

    Tracking is only active for passes of at least PROGRESS_MIN_RUNS runs.
    """

    sink: ProgressSink
    progress_id: str
    total: int

    @property
    def active(self) -> bool:
        """Whether updates are forwarded to the sink."""
        return self.total >= PROGRESS_MIN_RUNS

    def init(self, message: str) -> bool:
        """Start tracking, returning whether the sink accepted it."""
        return self._call("init", self.total, message)

    def increment(self, message: str) -> None:
        """Advance by one run."""
        self._call("increment", 1, message)

    def finish(self, message: str) -> None:
        """Mark the pass as done."""
        self._call("finish", message)

    def clear(self) -> None:
        """Release sink state for this pass."""
        self._call("clear")

    def _call(self, method: str, *args: object) -> bool:
        if not self.active:
            return False
        try:
            getattr(self.sink, method)(self.progress_id, *args)
        except Exception:
            log.debug("Progress sink %s failed", method, exc_info=True)
            return False
        return True
